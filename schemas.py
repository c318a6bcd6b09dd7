# Wire format: explicit storage-name -> camelCase mappings per entity
import json

from marshmallow import EXCLUDE, Schema, fields, validate
from marshmallow import ValidationError as SchemaValidationError

from errors import ValidationError


# --- Response schemas ---

class ProfileSchema(Schema):
    username = fields.Str(data_key='userName')
    profile_name = fields.Str(data_key='profileName')
    profile_description = fields.Str(data_key='profileDescription')
    avatar_url = fields.Str(data_key='avatarUrl', allow_none=True)
    follower_count = fields.Int(data_key='followerCount')
    following_count = fields.Int(data_key='followingCount')
    account_activated = fields.Bool(data_key='accountActivated')


class PostSchema(Schema):
    post_id = fields.Int(data_key='postId')
    post_author = fields.Str(data_key='postAuthor')
    post_type = fields.Str(data_key='postType')
    post_title = fields.Str(data_key='postTitle')
    post_body = fields.Str(data_key='postBody')
    post_tags = fields.List(fields.Str(), data_key='postTags')
    post_like_count = fields.Int(data_key='postLikeCount')
    post_comment_count = fields.Int(data_key='postCommentCount')
    post_modified_time = fields.DateTime(data_key='postModifiedTime')
    edited = fields.Bool()
    # Filled in per viewer by the like annotator
    liked_by_viewer = fields.Bool(data_key='userLikeStatus', dump_default=False)


class CommentSchema(Schema):
    comment_id = fields.Int(data_key='commentId')
    comment_author = fields.Str(data_key='commentAuthor')
    comment_parent_post = fields.Int(data_key='commentParentPost')
    comment_type = fields.Str(data_key='commentType')
    comment_body = fields.Str(data_key='commentBody')
    comment_reply_parent = fields.Int(data_key='commentReplyParent', allow_none=True)
    comment_like_count = fields.Int(data_key='commentLikeCount')
    comment_reply_count = fields.Int(data_key='commentReplyCount')
    comment_created_time = fields.DateTime(data_key='commentCreatedTime')
    comment_modified_time = fields.DateTime(data_key='commentModifiedTime')
    edited = fields.Bool()


def _comment_head(schema, node):
    """JSON text of one comment up to its open ``childComments`` array."""
    data = schema.dump(node.payload)
    data['userLikeStatus'] = node.liked_by_viewer
    return json.dumps(data)[:-1] + ', "childComments": ['


def _pending(nodes):
    # Reversed with separators so popping yields siblings in order
    items = []
    for index, node in enumerate(reversed(nodes)):
        if index:
            items.append(', ')
        items.append(node)
    return items


def encode_comment_trees(nodes):
    """Encode CommentNodes as a JSON array of nested comments.

    Text is emitted from an explicit stack, so nesting depth is not limited
    by the interpreter recursion limit.
    """
    schema = CommentSchema()
    parts = ['[']
    stack = [']'] + _pending(nodes)
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        parts.append(_comment_head(schema, item))
        stack.append(']}')
        stack.extend(_pending(item.children))
    return ''.join(parts)


def encode_comment_tree(node):
    return encode_comment_trees([node])[1:-1]


# --- Request schemas ---

class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    post_id = fields.Int(data_key='postId')
    comment_body = fields.Str(data_key='commentBody', required=True,
                              validate=validate.Length(min=1, max=10000))
    comment_type = fields.Str(data_key='commentType', load_default='ROOT')
    comment_parent = fields.Int(data_key='commentParent', load_default=None, allow_none=True)


class CommentUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    comment_body = fields.Str(data_key='commentBody', required=True,
                              validate=validate.Length(min=1, max=10000))


class PostCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    post_title = fields.Str(data_key='postTitle', required=True, validate=validate.Length(min=1, max=300))
    post_body = fields.Str(data_key='postBody', required=True, validate=validate.Length(min=1))
    post_type = fields.Str(data_key='postType', load_default='TEXT')
    post_tags = fields.Str(data_key='postTags', load_default=None, allow_none=True)


def load_request(schema, data):
    """Validate a request body, reporting failures by their wire field names."""
    try:
        return schema.load(data if data is not None else {})
    except SchemaValidationError as err:
        messages = err.messages if isinstance(err.messages, dict) else {'_schema': err.messages}
        raise ValidationError(sorted(messages))
