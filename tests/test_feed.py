import pytest

from errors import ValidationError
from feed import FeedAssembler
from likes import POST, LikeAnnotator, toggle_like
from recommendations import RecommendationSampler


@pytest.fixture
def assembler(services):
    return services['feed']


def post_ids(feed):
    return [post.post_id for post in feed.posts]


def test_alice_bob_carol_scenario(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob', 'carol')
    link('alice', 'bob')
    bob_posts = [make_post('bob', title=f'bob {index}') for index in range(2)]
    carol_posts = [make_post('carol', title=f'carol {index}') for index in range(3)]

    first = assembler.get_feed('alice', 1, 1)
    assert post_ids(first) == list(reversed(bob_posts))
    assert first.fallback_active is False

    second = assembler.get_feed('alice', 2, 1)
    assert post_ids(second) == list(reversed(carol_posts))
    assert second.fallback_active is True


def test_fallback_when_followed_account_never_posted(assembler, make_profile, make_post, link):
    make_profile('alice', 'quiet', 'carol')
    link('alice', 'quiet')
    make_post('carol')

    feed = assembler.get_feed('alice', 1, 1)

    assert feed.fallback_active is True
    assert len(feed.posts) == 1


def test_visitor_sees_all_posts_newest_first(assembler, make_profile, make_post):
    make_profile('bob', 'carol')
    created = [make_post('bob'), make_post('carol'), make_post('bob')]

    feed = assembler.get_feed(None, 1, 1)

    assert post_ids(feed) == list(reversed(created))
    assert feed.fallback_active is False


def test_viewer_following_nobody_is_treated_as_visitor(assembler, make_profile, make_post):
    make_profile('alice', 'bob')
    created = [make_post('bob'), make_post('alice')]

    feed = assembler.get_feed('alice', 1, 1)

    assert post_ids(feed) == list(reversed(created))
    assert feed.fallback_active is False


def test_same_arguments_give_same_page(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob', 'carol')
    link('alice', 'bob')
    for _ in range(12):
        make_post('bob')
        make_post('carol')

    assert post_ids(assembler.get_feed('alice', 2, 1)) == post_ids(assembler.get_feed('alice', 2, 1))
    assert post_ids(assembler.get_feed(None, 1, 1)) == post_ids(assembler.get_feed(None, 1, 1))


def test_global_pages_never_repeat(assembler, make_profile, make_post):
    make_profile('carol')
    created = {make_post('carol') for _ in range(25)}

    pages = [post_ids(assembler.get_feed(None, page, 1)) for page in range(1, 5)]

    assert [len(page) for page in pages] == [10, 10, 5, 0]
    seen = [post_id for page in pages for post_id in page]
    assert len(seen) == len(set(seen))
    assert set(seen) == created


def test_followed_pages_never_repeat(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob', 'dave', 'carol')
    link('alice', 'bob')
    link('alice', 'dave', minute=1)
    followed_posts = set()
    for _ in range(12):
        followed_posts.add(make_post('bob'))
        followed_posts.add(make_post('dave'))
        make_post('carol')

    feeds = [assembler.get_feed('alice', page, 1) for page in range(1, 5)]

    assert [len(feed.posts) for feed in feeds[:3]] == [10, 10, 4]
    assert [feed.fallback_active for feed in feeds] == [False, False, False, True]
    seen = [post_id for feed in feeds[:3] for post_id in post_ids(feed)]
    assert len(seen) == len(set(seen))
    assert set(seen) == followed_posts
    assert not set(post_ids(feeds[3])) & followed_posts


def test_fallback_pages_resume_without_repeats(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob', 'carol')
    link('alice', 'bob')
    bob_posts = {make_post('bob') for _ in range(2)}
    carol_posts = {make_post('carol') for _ in range(15)}

    first = assembler.get_feed('alice', 2, 1)
    second = assembler.get_feed('alice', 2, 2)
    exhausted = assembler.get_feed('alice', 2, 3)

    assert len(first.posts) == 10
    assert len(second.posts) == 5
    assert exhausted.posts == []
    assert exhausted.fallback_active is True
    seen = post_ids(first) + post_ids(second)
    assert len(seen) == len(set(seen))
    assert set(seen) == carol_posts
    assert not set(seen) & bob_posts


def test_posts_carry_viewer_like_state(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob')
    link('alice', 'bob')
    liked, unliked = make_post('bob'), make_post('bob')
    toggle_like(POST, liked, 'alice', True)

    states = {post.post_id: post.liked_by_viewer for post in assembler.get_feed('alice', 1, 1).posts}

    assert states == {liked: True, unliked: False}


def test_recommendations_attached_in_every_mode(assembler, make_profile, make_post, link):
    make_profile('alice', 'bob', 'carol')
    link('alice', 'bob')
    make_post('carol')

    assert [p.username for p in assembler.get_feed('alice', 1, 1).recommended] == ['carol']
    assert [p.username for p in assembler.get_feed('alice', 5, 5).recommended] == ['carol']
    assert assembler.get_feed(None, 1, 1).recommended


@pytest.mark.parametrize('feed_page, fallback_page, invalid', [
    (0, 1, ['feedPage']),
    ('abc', 1, ['feedPage']),
    (1, '-2', ['fallbackPage']),
    ('1.5', 0, ['feedPage', 'fallbackPage']),
    ('99999999999999999999', 1, ['feedPage']),
    (1, 2 ** 31, ['fallbackPage']),
])
def test_invalid_page_numbers(app, feed_page, fallback_page, invalid):
    assembler = FeedAssembler(LikeAnnotator(), RecommendationSampler())

    with pytest.raises(ValidationError) as excinfo:
        assembler.get_feed(None, feed_page, fallback_page)

    assert excinfo.value.invalid_properties == invalid


def test_feed_route(client, make_profile, make_post, link, auth_headers):
    make_profile('alice', 'bob', 'carol')
    link('alice', 'bob')
    make_post('bob', title='Hello from bob')
    make_post('carol')

    response = client.get('/feed?feedPage=1&fallbackPage=1', headers=auth_headers('alice'))

    assert response.status_code == 200
    data = response.get_json()
    assert data['actionResult'] == 'SUCCESS'
    assert data['feedFallback'] is False
    assert [post['postAuthor'] for post in data['feedData']] == ['bob']
    assert data['feedData'][0]['postTitle'] == 'Hello from bob'
    assert data['feedData'][0]['postTags'] == ['hello', 'from', 'bob']
    assert data['feedData'][0]['userLikeStatus'] is False
    assert [user['userName'] for user in data['recommendedUsers']] == ['carol']


def test_feed_route_defaults_to_first_pages(client, make_profile, make_post):
    make_profile('bob')
    make_post('bob')

    data = client.get('/feed').get_json()

    assert len(data['feedData']) == 1
    assert data['feedFallback'] is False


def test_feed_route_rejects_bad_page(client):
    response = client.get('/feed?feedPage=zero')

    assert response.status_code == 400
    assert response.get_json() == {
        "actionResult": "ERR_INVALID_PROPERTIES",
        "invalidProperties": ["feedPage"]
    }


def test_feed_route_rejects_oversized_page(client, make_profile, make_post):
    make_profile('bob')
    make_post('bob')

    response = client.get('/feed?feedPage=99999999999999999999&fallbackPage=1')

    assert response.status_code == 400
    assert response.get_json()['invalidProperties'] == ['feedPage']
