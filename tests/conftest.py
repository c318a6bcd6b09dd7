from datetime import datetime, timedelta

import pytest
from flask_jwt_extended import create_access_token

from app import create_app
from models import db, Profile, ProfileFollow


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.services


@pytest.fixture
def make_profile(app):
    """Create accounts by username and return the first one."""
    def _make_profile(*usernames, activated=True):
        for username in usernames:
            db.session.add(Profile(
                username=username,
                profile_name=username.title(),
                profile_description=f"{username}'s profile",
                account_activated=activated
            ))
        db.session.commit()
        return usernames[0]
    return _make_profile


@pytest.fixture
def make_post(services):
    def _make_post(author, title='A post title', body='Some post body'):
        return services['posts'].create_post(author, title, body).post_id
    return _make_post


@pytest.fixture
def link(app):
    """Insert a follow edge with a controlled timestamp, keeping both counters right."""
    base = datetime(2024, 1, 1, 12, 0, 0)

    def _link(follower, following, minute=0):
        db.session.add(ProfileFollow(
            follower_username=follower,
            following_username=following,
            follow_since=base + timedelta(minutes=minute)
        ))
        db.session.get(Profile, following).follower_count += 1
        db.session.get(Profile, follower).following_count += 1
        db.session.commit()
    return _link


@pytest.fixture
def auth_headers(app):
    def _auth_headers(username):
        return {"Authorization": f"Bearer {create_access_token(identity=username)}"}
    return _auth_headers
