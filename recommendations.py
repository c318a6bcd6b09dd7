# "Accounts you might know" sampling
from sqlalchemy import func
from sqlalchemy.orm import aliased

from follows import followed_usernames
from models import db, Profile, ProfileFollow
from paging import Tier, first_non_empty


def _exclude(query, column, excluded):
    if excluded:
        query = query.filter(column.notin_(excluded))
    return query


def friends_of_follows(viewer, excluded, limit):
    """Accounts followed by the viewer's follows, newest connecting edge first."""
    viewer_edge = aliased(ProfileFollow)
    second_edge = aliased(ProfileFollow)
    latest_edge = func.max(second_edge.follow_since)

    query = db.session.query(second_edge.following_username)\
        .join(viewer_edge, viewer_edge.following_username == second_edge.follower_username)\
        .filter(viewer_edge.follower_username == viewer)
    query = _exclude(query, second_edge.following_username, excluded)

    rows = query.group_by(second_edge.following_username)\
        .order_by(latest_edge.desc(), second_edge.following_username)\
        .limit(limit)\
        .all()
    return [username for (username,) in rows]


def recently_followed(viewer, excluded, limit):
    """Targets of the most recently created follow edges anywhere on the site."""
    latest_edge = func.max(ProfileFollow.follow_since)
    query = _exclude(db.session.query(ProfileFollow.following_username),
                     ProfileFollow.following_username, excluded)

    rows = query.group_by(ProfileFollow.following_username)\
        .order_by(latest_edge.desc(), ProfileFollow.following_username)\
        .limit(limit)\
        .all()
    return [username for (username,) in rows]


def most_followed(viewer, excluded, limit):
    query = _exclude(db.session.query(Profile.username), Profile.username, excluded)
    rows = query.order_by(Profile.follower_count.desc(), Profile.username)\
        .limit(limit)\
        .all()
    return [username for (username,) in rows]


PERSONALIZED_TIERS = [
    Tier('friends_of_follows', friends_of_follows),
    Tier('most_followed', most_followed),
]

ANONYMOUS_TIERS = [
    Tier('recently_followed', recently_followed),
    Tier('most_followed', most_followed),
]


class RecommendationSampler:
    """Picks up to ``limit`` profiles to suggest, degrading from graph-based to popularity-based tiers.

    The viewer and everyone the viewer already follows are never suggested.
    """

    def __init__(self, limit=5, personalized_tiers=None, anonymous_tiers=None):
        self.limit = limit
        self.personalized_tiers = personalized_tiers or PERSONALIZED_TIERS
        self.anonymous_tiers = anonymous_tiers or ANONYMOUS_TIERS

    def sample(self, viewer):
        followed = followed_usernames(viewer)
        excluded = followed + [viewer] if viewer is not None else []
        tiers = self.personalized_tiers if followed else self.anonymous_tiers

        _, usernames = first_non_empty(tiers, lambda tier: tier.fetch(viewer, excluded, self.limit))
        return self._load_profiles(usernames)

    @staticmethod
    def _load_profiles(usernames):
        if not usernames:
            return []
        profiles = Profile.query.filter(Profile.username.in_(usernames)).all()
        by_username = {profile.username: profile for profile in profiles}
        return [by_username[username] for username in usernames if username in by_username]
