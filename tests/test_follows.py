import pytest

from errors import ConflictError, NotFoundError
from follows import followed_usernames, follows_anyone
from models import db, Profile, ProfileFollow


@pytest.fixture
def follow_service(services, make_profile):
    make_profile('alice', 'bob', 'carol')
    return services['follows']


def counts(username):
    profile = db.session.get(Profile, username)
    return profile.follower_count, profile.following_count


def test_follow_adjusts_both_counters(follow_service):
    follow_service.follow('alice', 'bob')
    follow_service.follow('carol', 'bob')

    assert counts('bob') == (2, 0)
    assert counts('alice') == (0, 1)
    assert followed_usernames('alice') == ['bob']
    assert follows_anyone('alice') is True
    assert follows_anyone('bob') is False
    assert follows_anyone(None) is False


def test_unfollow_reverses_counters(follow_service):
    follow_service.follow('alice', 'bob')
    follow_service.unfollow('alice', 'bob')

    assert counts('bob') == (0, 0)
    assert counts('alice') == (0, 0)
    assert ProfileFollow.query.count() == 0


@pytest.mark.parametrize('action, target, action_result', [
    ('follow', 'alice', 'ERR_SELF_FOLLOW'),
    ('unfollow', 'alice', 'ERR_SELF_UNFOLLOW'),
    ('unfollow', 'bob', 'ERR_NOT_FOLLOWED'),
])
def test_follow_conflicts(follow_service, action, target, action_result):
    with pytest.raises(ConflictError) as excinfo:
        getattr(follow_service, action)('alice', target)

    assert excinfo.value.action_result == action_result
    assert counts('alice') == (0, 0)


def test_duplicate_follow_keeps_counts(follow_service):
    follow_service.follow('alice', 'bob')

    with pytest.raises(ConflictError) as excinfo:
        follow_service.follow('alice', 'bob')

    assert excinfo.value.action_result == 'ERR_ALREADY_FOLLOWED'
    assert counts('bob') == (1, 0)
    assert counts('alice') == (0, 1)


def test_follow_unknown_account(follow_service):
    with pytest.raises(NotFoundError):
        follow_service.follow('alice', 'nobody')
    assert counts('alice') == (0, 0)


def test_follow_routes(client, follow_service, auth_headers):
    headers = auth_headers('alice')

    assert client.post('/users/bob/follows', headers=headers).status_code == 200

    response = client.post('/users/bob/follows', headers=headers)
    assert response.status_code == 400
    assert response.get_json() == {"actionResult": "ERR_ALREADY_FOLLOWED"}

    assert client.delete('/users/bob/follows', headers=headers).status_code == 200
    assert client.get('/users/nobody/follows').status_code == 405
