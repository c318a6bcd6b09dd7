# Comment trees: paginated root comments expanded into full reply subtrees
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from errors import NotFoundError, PermissionDeniedError, ValidationError
from follows import require_active_account
from likes import COMMENT, toggle_like
from models import db, transaction, COMMENT_TYPES, Comment, CommentLike, Post
from paging import page_offset, parse_page


@dataclass
class CommentNode:
    payload: Comment
    liked_by_viewer: bool = False
    children: List['CommentNode'] = field(default_factory=list)

    @property
    def id(self):
        return self.payload.comment_id


def _oldest_first(query):
    return query.order_by(Comment.comment_created_time.asc(), Comment.comment_id.asc())


class CommentTreeBuilder:
    """Reads and writes threaded comments.

    Root comments are paginated; everything below a root is returned in full.
    Trees are expanded with a breadth-first worklist, one child query per
    visited node, so depth is bounded only by the data and never by the call
    stack. Siblings are always ordered by creation time, oldest first.
    """

    def __init__(self, like_annotator, page_size=10):
        self.like_annotator = like_annotator
        self.page_size = page_size

    # Reads

    def get_root_page(self, post_id, viewer, comment_page):
        comment_page = parse_page(comment_page, 'commentPage')
        if db.session.get(Post, post_id) is None:
            raise NotFoundError(['postId'])

        roots = _oldest_first(Comment.query.filter_by(comment_parent_post=post_id, comment_type='ROOT'))\
            .offset(page_offset(comment_page, self.page_size))\
            .limit(self.page_size)\
            .all()
        return self._expand(roots, viewer)

    def get_subtree(self, comment_id, viewer):
        comment = self.get_comment(comment_id)
        return self._expand([comment], viewer)[0]

    def get_comment(self, comment_id):
        comment = db.session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(['commentId'])
        return comment

    def _expand(self, comments, viewer):
        roots = [self._node(comment, viewer) for comment in comments]
        worklist = deque(roots)
        while worklist:
            node = worklist.popleft()
            for child in self._direct_children(node.id):
                child_node = self._node(child, viewer)
                node.children.append(child_node)
                worklist.append(child_node)
        return roots

    def _node(self, comment, viewer):
        return CommentNode(
            payload=comment,
            liked_by_viewer=self.like_annotator.is_liked_by(COMMENT, comment.comment_id, viewer)
        )

    @staticmethod
    def _direct_children(comment_id):
        return _oldest_first(Comment.query.filter_by(comment_reply_parent=comment_id)).all()

    # Mutations

    def create_comment(self, post_id, author, body, comment_type='ROOT', parent_comment=None):
        """Insert a comment and bump the post's (and the parent's) counters atomically."""
        if comment_type not in COMMENT_TYPES:
            raise ValidationError(['commentType'])
        if comment_type == 'REPLY' and parent_comment is None:
            raise ValidationError(['commentParent'])
        if comment_type == 'ROOT' and parent_comment is not None:
            raise ValidationError(['commentParent'])
        require_active_account(author)

        with transaction():
            if db.session.get(Post, post_id) is None:
                raise NotFoundError(['postId'])
            if comment_type == 'REPLY':
                parent = db.session.get(Comment, parent_comment)
                # Replies may only hang off a comment of the same post
                if parent is None or parent.comment_parent_post != post_id:
                    raise ValidationError(['commentParent'])

            now = datetime.utcnow()
            new_comment = Comment(
                comment_author=author,
                comment_parent_post=post_id,
                comment_type=comment_type,
                comment_body=body,
                comment_reply_parent=parent_comment,
                comment_created_time=now,
                comment_modified_time=now
            )
            db.session.add(new_comment)
            db.session.flush()

            self._apply_comment_counters(post_id, parent_comment, 1)

        logging.info(f"Comment {new_comment.comment_id} created on post {post_id} by {author}")
        return new_comment

    def update_comment(self, comment_id, author, body):
        with transaction():
            comment = self._authored_comment(comment_id, author)
            comment.comment_body = body
            comment.comment_modified_time = datetime.utcnow()
            comment.edited = True
        return comment

    def delete_comment(self, comment_id, author):
        """Remove a comment together with every reply beneath it."""
        with transaction():
            comment = self._authored_comment(comment_id, author)
            post_id, parent_id = comment.comment_parent_post, comment.comment_reply_parent

            subtree_ids = [comment_id]
            worklist = deque([comment_id])
            while worklist:
                rows = db.session.query(Comment.comment_id)\
                    .filter(Comment.comment_reply_parent == worklist.popleft())\
                    .all()
                for (child_id,) in rows:
                    subtree_ids.append(child_id)
                    worklist.append(child_id)

            CommentLike.query.filter(CommentLike.comment_id.in_(subtree_ids))\
                .delete(synchronize_session=False)
            # Deepest replies first so no row outlives its parent
            for doomed_id in reversed(subtree_ids):
                Comment.query.filter_by(comment_id=doomed_id).delete(synchronize_session=False)

            Post.query.filter_by(post_id=post_id)\
                .update({Post.post_comment_count: Post.post_comment_count - len(subtree_ids)})
            if parent_id is not None:
                Comment.query.filter_by(comment_id=parent_id)\
                    .update({Comment.comment_reply_count: Comment.comment_reply_count - 1})
            db.session.expunge(comment)

        logging.info(f"Comment {comment_id} and {len(subtree_ids) - 1} repl(ies) deleted by {author}")
        return len(subtree_ids)

    def toggle_like(self, comment_id, viewer, like):
        toggle_like(COMMENT, comment_id, viewer, like)

    def _authored_comment(self, comment_id, author):
        require_active_account(author)
        comment = self.get_comment(comment_id)
        if comment.comment_author != author:
            raise PermissionDeniedError()
        return comment

    @staticmethod
    def _apply_comment_counters(post_id, parent_comment, delta):
        Post.query.filter_by(post_id=post_id)\
            .update({Post.post_comment_count: Post.post_comment_count + delta})
        if parent_comment is not None:
            Comment.query.filter_by(comment_id=parent_comment)\
                .update({Comment.comment_reply_count: Comment.comment_reply_count + delta})
