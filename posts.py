# Post lifecycle and post likes
import logging
import re
from datetime import datetime
from urllib.parse import urlparse

from sqlalchemy import select

from errors import NotFoundError, PermissionDeniedError, ValidationError
from follows import require_active_account
from likes import POST, toggle_like
from models import db, transaction, POST_TYPES, Comment, CommentLike, Post, PostLike
from paging import page_offset, parse_page

MAX_TAGS = 4
TAG_SEPARATORS = re.compile(r'[.\s,_\-;:!?]+')


def tags_from_text(text):
    """First distinct lowercase words of ``text``, at most four."""
    tags = []
    for word in TAG_SEPARATORS.split(text.lower()):
        if word and word not in tags:
            tags.append(word)
        if len(tags) == MAX_TAGS:
            break
    return tags


def _validate_post(post_type, body):
    if post_type not in POST_TYPES:
        raise ValidationError(['postType'])
    if post_type != 'TEXT':
        # Link, image and video posts carry a remote URL as their body
        url = urlparse(body.strip())
        if url.scheme not in ('http', 'https') or not url.hostname or url.hostname == 'localhost':
            raise ValidationError(['postBody'])


class PostService:

    def __init__(self, like_annotator, like_page_size=10):
        self.like_annotator = like_annotator
        self.like_page_size = like_page_size

    def create_post(self, author, title, body, post_type='TEXT', tags=None):
        _validate_post(post_type, body)
        require_active_account(author)

        with transaction():
            new_post = Post(
                post_author=author,
                post_type=post_type,
                post_title=title,
                post_body=body,
                post_tags=tags_from_text(tags if tags is not None else title),
                post_modified_time=datetime.utcnow()
            )
            db.session.add(new_post)

        logging.info(f"Post {new_post.post_id} created by {author}")
        return new_post

    def get_post(self, post_id, viewer):
        post = self._existing_post(post_id)
        post.liked_by_viewer = self.like_annotator.is_liked_by(POST, post_id, viewer)
        return post

    def update_post(self, post_id, author, title, body, post_type='TEXT', tags=None):
        _validate_post(post_type, body)
        with transaction():
            post = self._authored_post(post_id, author)
            post.post_title = title
            post.post_body = body
            post.post_type = post_type
            post.post_tags = tags_from_text(tags if tags is not None else title)
            post.post_modified_time = datetime.utcnow()
            post.edited = True
        return post

    def delete_post(self, post_id, author):
        """Delete a post and everything hanging off it."""
        with transaction():
            post = self._authored_post(post_id, author)
            comment_ids = select(Comment.comment_id).where(Comment.comment_parent_post == post_id)

            CommentLike.query.filter(CommentLike.comment_id.in_(comment_ids))\
                .delete(synchronize_session=False)
            Comment.query.filter_by(comment_parent_post=post_id).delete(synchronize_session=False)
            PostLike.query.filter_by(post_id=post_id).delete(synchronize_session=False)
            db.session.delete(post)

        logging.info(f"Post {post_id} deleted by {author}")

    def toggle_like(self, post_id, viewer, like):
        toggle_like(POST, post_id, viewer, like)

    def get_likers(self, post_id, like_page):
        """Usernames that liked the post, one alphabetical page at a time."""
        page = parse_page(like_page, 'likePage')
        self._existing_post(post_id)
        rows = PostLike.query.filter_by(post_id=post_id)\
            .order_by(PostLike.username)\
            .offset(page_offset(page, self.like_page_size))\
            .limit(self.like_page_size).all()
        return [row.username for row in rows]

    def get_like_status(self, post_id, username):
        self._existing_post(post_id)
        return self.like_annotator.is_liked_by(POST, post_id, username)

    def _existing_post(self, post_id):
        post = db.session.get(Post, post_id)
        if post is None:
            raise NotFoundError(['postId'])
        return post

    def _authored_post(self, post_id, author):
        require_active_account(author)
        post = self._existing_post(post_id)
        if post.post_author != author:
            raise PermissionDeniedError()
        return post
