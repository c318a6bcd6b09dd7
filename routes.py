# Routes for handling requests
import json

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from errors import ValidationError
from schemas import (CommentCreateSchema, CommentSchema, CommentUpdateSchema, PostCreateSchema,
                     PostSchema, ProfileSchema, encode_comment_tree, encode_comment_trees, load_request)

# Create blueprints for different route categories
main_bp = Blueprint('main', __name__)
feed_bp = Blueprint('feed', __name__)
posts_bp = Blueprint('posts', __name__)
comments_bp = Blueprint('comments', __name__)
users_bp = Blueprint('users', __name__)


def _success(**payload):
    return jsonify({"actionResult": "SUCCESS", **payload}), 200


def _success_with_encoded(name, encoded):
    """Success envelope around a value that is already JSON text."""
    body = f'{{"actionResult": "SUCCESS", {json.dumps(name)}: {encoded}}}'
    return current_app.response_class(body, status=200, mimetype='application/json')


@main_bp.route('/heartbeat', methods=['GET'])
def heartbeat():
    return _success()


# Feed

@feed_bp.route('', methods=['GET'])
@jwt_required(optional=True)
def get_feed():
    """Personalized feed page plus recommended accounts"""
    feed = current_app.services['feed'].get_feed(
        get_jwt_identity(),
        request.args.get('feedPage', '1'),
        request.args.get('fallbackPage', '1')
    )
    return _success(
        feedData=PostSchema(many=True).dump(feed.posts),
        feedFallback=feed.fallback_active,
        recommendedUsers=ProfileSchema(many=True).dump(feed.recommended)
    )


# Posts

@posts_bp.route('', methods=['POST'])
@jwt_required()
def create_post():
    data = load_request(PostCreateSchema(), request.get_json(silent=True))
    new_post = current_app.services['posts'].create_post(
        get_jwt_identity(),
        data['post_title'],
        data['post_body'],
        data['post_type'],
        data['post_tags']
    )
    return _success(postId=new_post.post_id)


@posts_bp.route('/<int:post_id>', methods=['GET'])
@jwt_required(optional=True)
def get_post(post_id):
    post = current_app.services['posts'].get_post(post_id, get_jwt_identity())
    return _success(postData=PostSchema().dump(post))


@posts_bp.route('/<int:post_id>', methods=['PUT'])
@jwt_required()
def update_post(post_id):
    data = load_request(PostCreateSchema(), request.get_json(silent=True))
    current_app.services['posts'].update_post(
        post_id,
        get_jwt_identity(),
        data['post_title'],
        data['post_body'],
        data['post_type'],
        data['post_tags']
    )
    return _success()


@posts_bp.route('/<int:post_id>', methods=['DELETE'])
@jwt_required()
def delete_post(post_id):
    current_app.services['posts'].delete_post(post_id, get_jwt_identity())
    return _success()


@posts_bp.route('/<int:post_id>/likes', methods=['GET'])
def get_post_likes(post_id):
    liked_users = current_app.services['posts'].get_likers(post_id, request.args.get('likePage', '1'))
    return _success(likedUsers=liked_users)


@posts_bp.route('/<int:post_id>/likes/<string:username>', methods=['GET'])
def get_like_status(post_id, username):
    return _success(likeStatus=current_app.services['posts'].get_like_status(post_id, username))


@posts_bp.route('/<int:post_id>/likes', methods=['POST', 'DELETE'])
@jwt_required()
def toggle_post_like(post_id):
    current_app.services['posts'].toggle_like(post_id, get_jwt_identity(), request.method == 'POST')
    return _success()


@posts_bp.route('/<int:post_id>/comments', methods=['GET'])
@jwt_required(optional=True)
def get_post_comments(post_id):
    """Root comments of a post, one page at a time, each with its full reply tree"""
    trees = current_app.services['comments'].get_root_page(
        post_id,
        get_jwt_identity(),
        request.args.get('commentPage', '1')
    )
    return _success_with_encoded('postComments', encode_comment_trees(trees))


@posts_bp.route('/<int:post_id>/comments', methods=['POST'])
@jwt_required()
def add_post_comment(post_id):
    data = load_request(CommentCreateSchema(), request.get_json(silent=True))
    return _create_comment(post_id, data)


# Comments

@comments_bp.route('', methods=['POST'])
@jwt_required()
def add_comment():
    data = load_request(CommentCreateSchema(), request.get_json(silent=True))
    if data.get('post_id') is None:
        raise ValidationError(['postId'])
    return _create_comment(data['post_id'], data)


def _create_comment(post_id, data):
    new_comment = current_app.services['comments'].create_comment(
        post_id,
        get_jwt_identity(),
        data['comment_body'],
        data['comment_type'],
        data['comment_parent']
    )
    return _success(postId=post_id, commentId=new_comment.comment_id)


@comments_bp.route('/<int:comment_id>', methods=['GET'])
def get_comment(comment_id):
    comment = current_app.services['comments'].get_comment(comment_id)
    return _success(commentData=CommentSchema().dump(comment))


@comments_bp.route('/<int:comment_id>/tree', methods=['GET'])
@jwt_required(optional=True)
def get_comment_tree(comment_id):
    node = current_app.services['comments'].get_subtree(comment_id, get_jwt_identity())
    return _success_with_encoded('commentData', encode_comment_tree(node))


@comments_bp.route('/<int:comment_id>', methods=['PUT'])
@jwt_required()
def update_comment(comment_id):
    data = load_request(CommentUpdateSchema(), request.get_json(silent=True))
    current_app.services['comments'].update_comment(comment_id, get_jwt_identity(), data['comment_body'])
    return _success()


@comments_bp.route('/<int:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id):
    current_app.services['comments'].delete_comment(comment_id, get_jwt_identity())
    return _success()


@comments_bp.route('/<int:comment_id>/likes', methods=['POST', 'DELETE'])
@jwt_required()
def toggle_comment_like(comment_id):
    current_app.services['comments'].toggle_like(comment_id, get_jwt_identity(), request.method == 'POST')
    return _success()


# Users

@users_bp.route('/recommended', methods=['GET'])
@jwt_required(optional=True)
def get_recommended_users():
    recommended = current_app.services['recommendations'].sample(get_jwt_identity())
    return _success(recommendedUsers=ProfileSchema(many=True).dump(recommended))


@users_bp.route('/<string:username>/follows', methods=['POST'])
@jwt_required()
def follow_user(username):
    current_app.services['follows'].follow(get_jwt_identity(), username)
    return _success()


@users_bp.route('/<string:username>/follows', methods=['DELETE'])
@jwt_required()
def unfollow_user(username):
    current_app.services['follows'].unfollow(get_jwt_identity(), username)
    return _success()
