# Like state: per-viewer annotation and the like / unlike toggle
import logging
from collections import namedtuple

from sqlalchemy.exc import IntegrityError

from errors import ConflictError, NotFoundError
from follows import require_active_account
from models import db, transaction, Post, PostLike, Comment, CommentLike

POST = 'POST'
COMMENT = 'COMMENT'

LikeTarget = namedtuple('LikeTarget', ['entity_model', 'like_model', 'id_column', 'count_column', 'id_property'])

LIKE_TARGETS = {
    POST: LikeTarget(Post, PostLike, 'post_id', 'post_like_count', 'postId'),
    COMMENT: LikeTarget(Comment, CommentLike, 'comment_id', 'comment_like_count', 'commentId'),
}


def _target(entity_kind):
    try:
        return LIKE_TARGETS[entity_kind]
    except KeyError:
        raise ValueError(f"Unknown likeable entity kind: {entity_kind}")


class LikeAnnotator:
    """Answers "has this viewer liked this entity?" from the likes join tables."""

    def is_liked_by(self, entity_kind, entity_id, viewer):
        target = _target(entity_kind)
        if viewer is None:
            return False
        return target.like_model.query.filter_by(
            **{target.id_column: entity_id, 'username': viewer}
        ).first() is not None


def toggle_like(entity_kind, entity_id, viewer, like):
    """Like (``like=True``) or unlike an entity and keep its like counter in step.

    The join row is the source of truth: liking twice raises
    ``ERR_ALREADY_LIKED`` and unliking a non-liked entity raises
    ``ERR_NOT_LIKED``, neither touching the counter.
    """
    target = _target(entity_kind)
    require_active_account(viewer)
    row_key = {target.id_column: entity_id, 'username': viewer}

    try:
        with transaction():
            if db.session.get(target.entity_model, entity_id) is None:
                raise NotFoundError([target.id_property])

            existing_like = target.like_model.query.filter_by(**row_key).first()
            if like:
                if existing_like:
                    raise ConflictError('ERR_ALREADY_LIKED')
                db.session.add(target.like_model(**row_key))
                delta = 1
            else:
                if existing_like is None:
                    raise ConflictError('ERR_NOT_LIKED')
                db.session.delete(existing_like)
                delta = -1

            count_column = getattr(target.entity_model, target.count_column)
            target.entity_model.query.filter_by(**{target.id_column: entity_id})\
                .update({count_column: count_column + delta})
    except IntegrityError:
        # Lost a race against an identical like request
        raise ConflictError('ERR_ALREADY_LIKED')

    logging.info(f"{viewer} {'liked' if like else 'unliked'} {entity_kind.lower()} {entity_id}")
