# Personalized / global post feed with a non-personalized fallback tier
from collections import namedtuple
from dataclasses import dataclass, field
from typing import List

from sqlalchemy import and_, select

from follows import follows_anyone
from likes import POST
from models import Post, Profile, ProfileFollow
from paging import Tier, first_non_empty, page_offset, parse_pages

# page_property names the request page counter the tier paginates with
FeedTier = namedtuple('FeedTier', Tier._fields + ('page_property', 'fallback'))


@dataclass
class FeedPage:
    posts: List[Post] = field(default_factory=list)
    fallback_active: bool = False
    recommended: List[Profile] = field(default_factory=list)


def _newest_first(query):
    return query.order_by(Post.post_modified_time.desc(), Post.post_id.desc())


class FeedAssembler:
    """Builds one page of a viewer's feed.

    Anonymous viewers, and viewers who follow nobody, page through every post.
    Everyone else pages through posts of the accounts they follow; once that
    supply is exhausted at the requested ``feedPage`` the feed falls back to
    posts from accounts they do not follow, paginated by the independent
    ``fallbackPage`` counter so repeated calls resume where they left off.
    """

    def __init__(self, like_annotator, recommendation_sampler, page_size=10):
        self.like_annotator = like_annotator
        self.recommendation_sampler = recommendation_sampler
        self.page_size = page_size

        self.anonymous_tiers = [
            FeedTier('all_posts', self._all_posts, 'feedPage', False),
        ]
        self.personalized_tiers = [
            FeedTier('following', self._following_posts, 'feedPage', False),
            FeedTier('not_following', self._not_following_posts, 'fallbackPage', True),
        ]

    def get_feed(self, viewer, feed_page, fallback_page):
        pages = parse_pages(feedPage=feed_page, fallbackPage=fallback_page)

        if follows_anyone(viewer):
            tiers = self.personalized_tiers
        else:
            # Following nobody gets the same feed as a visitor
            tiers = self.anonymous_tiers

        tier, posts = first_non_empty(
            tiers,
            lambda tier: tier.fetch(viewer, page_offset(pages[tier.page_property], self.page_size))
        )

        for post in posts:
            post.liked_by_viewer = self.like_annotator.is_liked_by(POST, post.post_id, viewer)

        return FeedPage(
            posts=posts,
            fallback_active=tier.fallback,
            recommended=self.recommendation_sampler.sample(viewer)
        )

    def _all_posts(self, viewer, offset):
        return _newest_first(Post.query).offset(offset).limit(self.page_size).all()

    def _following_posts(self, viewer, offset):
        query = Post.query.join(ProfileFollow, and_(
            ProfileFollow.following_username == Post.post_author,
            ProfileFollow.follower_username == viewer
        ))
        return _newest_first(query).offset(offset).limit(self.page_size).all()

    def _not_following_posts(self, viewer, offset):
        followed = select(ProfileFollow.following_username)\
            .where(ProfileFollow.follower_username == viewer)
        query = Post.query.filter(Post.post_author.notin_(followed))
        return _newest_first(query).offset(offset).limit(self.page_size).all()
