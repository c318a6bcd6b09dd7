# Database models
from contextlib import contextmanager
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

POST_TYPES = ('TEXT', 'LINK', 'IMAGE', 'VIDEO')
COMMENT_TYPES = ('ROOT', 'REPLY')


@contextmanager
def transaction():
    """Run a read-modify-write sequence as one unit of work.

    Commits when the block finishes, rolls back and re-raises on any error so
    no partial effect (row or counter) is ever persisted.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class Profile(db.Model):
    __tablename__ = 'Profiles'
    username = db.Column(db.String(50), primary_key=True)
    profile_name = db.Column(db.String(100), nullable=False, default='')
    profile_description = db.Column(db.Text, nullable=False, default='')
    avatar_url = db.Column(db.String(255))
    follower_count = db.Column(db.Integer, nullable=False, default=0)
    following_count = db.Column(db.Integer, nullable=False, default=0)
    account_activated = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class ProfileFollow(db.Model):
    __tablename__ = 'ProfileFollows'
    follower_username = db.Column(db.String(50), db.ForeignKey('Profiles.username', ondelete='CASCADE'),
                                  primary_key=True)
    following_username = db.Column(db.String(50), db.ForeignKey('Profiles.username', ondelete='CASCADE'),
                                   primary_key=True, index=True)
    follow_since = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    __table_args__ = (
        db.CheckConstraint('follower_username != following_username', name='ck_no_self_follow'),
    )


class Post(db.Model):
    __tablename__ = 'Posts'
    post_id = db.Column(db.Integer, primary_key=True)
    post_author = db.Column(db.String(50), db.ForeignKey('Profiles.username'), nullable=False, index=True)
    post_type = db.Column(db.String(10), nullable=False, default='TEXT')
    post_title = db.Column(db.String(300), nullable=False)
    post_body = db.Column(db.Text, nullable=False)
    post_tags = db.Column(db.JSON, nullable=False, default=list)
    post_like_count = db.Column(db.Integer, nullable=False, default=0)
    post_comment_count = db.Column(db.Integer, nullable=False, default=0)
    post_modified_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    edited = db.Column(db.Boolean, nullable=False, default=False)


class PostLike(db.Model):
    __tablename__ = 'PostLikes'
    post_id = db.Column(db.Integer, db.ForeignKey('Posts.post_id', ondelete='CASCADE'), primary_key=True)
    username = db.Column(db.String(50), db.ForeignKey('Profiles.username', ondelete='CASCADE'), primary_key=True)


class Comment(db.Model):
    __tablename__ = 'Comments'
    comment_id = db.Column(db.Integer, primary_key=True)
    comment_author = db.Column(db.String(50), db.ForeignKey('Profiles.username'), nullable=False, index=True)
    comment_parent_post = db.Column(db.Integer, db.ForeignKey('Posts.post_id', ondelete='CASCADE'),
                                    nullable=False, index=True)
    comment_type = db.Column(db.String(5), nullable=False, default='ROOT')
    comment_body = db.Column(db.Text, nullable=False)
    comment_reply_parent = db.Column(db.Integer, db.ForeignKey('Comments.comment_id', ondelete='CASCADE'),
                                     index=True)
    comment_like_count = db.Column(db.Integer, nullable=False, default=0)
    comment_reply_count = db.Column(db.Integer, nullable=False, default=0)
    comment_created_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    comment_modified_time = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    edited = db.Column(db.Boolean, nullable=False, default=False)


class CommentLike(db.Model):
    __tablename__ = 'CommentLikes'
    comment_id = db.Column(db.Integer, db.ForeignKey('Comments.comment_id', ondelete='CASCADE'), primary_key=True)
    username = db.Column(db.String(50), db.ForeignKey('Profiles.username', ondelete='CASCADE'), primary_key=True)
