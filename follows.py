# Follow graph: follow / unfollow toggles and viewer graph lookups
import logging

from sqlalchemy.exc import IntegrityError

from errors import ConflictError, InactiveAccountError, NotFoundError
from models import db, transaction, Profile, ProfileFollow


def require_active_account(username):
    """Return the viewer's profile, refusing unknown or deactivated accounts."""
    profile = db.session.get(Profile, username) if username else None
    if profile is None or not profile.account_activated:
        raise InactiveAccountError()
    return profile


def followed_usernames(viewer):
    if viewer is None:
        return []
    rows = db.session.query(ProfileFollow.following_username)\
        .filter(ProfileFollow.follower_username == viewer)\
        .all()
    return [username for (username,) in rows]


def follows_anyone(viewer):
    if viewer is None:
        return False
    return ProfileFollow.query.filter_by(follower_username=viewer).first() is not None


class FollowService:
    """Creates and removes follow edges together with both profiles' counters."""

    def follow(self, viewer, username):
        require_active_account(viewer)
        if viewer == username:
            raise ConflictError('ERR_SELF_FOLLOW')

        try:
            with transaction():
                if db.session.get(Profile, username) is None:
                    raise NotFoundError(['userName'])

                existing_follow = ProfileFollow.query.filter_by(
                    follower_username=viewer,
                    following_username=username
                ).first()
                if existing_follow:
                    raise ConflictError('ERR_ALREADY_FOLLOWED')

                db.session.add(ProfileFollow(follower_username=viewer, following_username=username))
                self._adjust_counts(viewer, username, 1)
        except IntegrityError:
            # A concurrent request inserted the same edge first
            raise ConflictError('ERR_ALREADY_FOLLOWED')

        logging.info(f"{viewer} followed {username}")

    def unfollow(self, viewer, username):
        require_active_account(viewer)
        if viewer == username:
            raise ConflictError('ERR_SELF_UNFOLLOW')

        with transaction():
            if db.session.get(Profile, username) is None:
                raise NotFoundError(['userName'])

            existing_follow = ProfileFollow.query.filter_by(
                follower_username=viewer,
                following_username=username
            ).first()
            if existing_follow is None:
                raise ConflictError('ERR_NOT_FOLLOWED')

            db.session.delete(existing_follow)
            self._adjust_counts(viewer, username, -1)

        logging.info(f"{viewer} unfollowed {username}")

    @staticmethod
    def _adjust_counts(follower, following, delta):
        Profile.query.filter_by(username=following)\
            .update({Profile.follower_count: Profile.follower_count + delta})
        Profile.query.filter_by(username=follower)\
            .update({Profile.following_count: Profile.following_count + delta})
