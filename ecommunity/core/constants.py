"""Global constants for the ecommunity application."""

# Collection names
USERS_COLLECTION = "users"
COMMUNITIES_COLLECTION = "communities"
POSTS_COLLECTION = "posts"
DISCUSSIONS_COLLECTION = "discussions"
TAGS_COLLECTION = "tags"
TAGS_DOCUMENT = "catalogue"

# User subcollections
FRIEND_REQUESTS_SUBCOLLECTION = "friendRequests"
NOTIFICATIONS_SUBCOLLECTION = "notifications"

# Friend request statuses
REQUEST_PENDING = "pending"
REQUEST_ACCEPTED = "accepted"
REQUEST_REJECTED = "rejected"

# Community privacy modes
PRIVACY_PUBLIC = "public"
PRIVACY_PRIVATE = "private"
PRIVACY_READ_ONLY = "read-only"
PRIVACY_MODES = (PRIVACY_PUBLIC, PRIVACY_PRIVATE, PRIVACY_READ_ONLY)
COMMUNITY_MAX_TAGS = 5
DEFAULT_COMMUNITY_IMAGE = (
    "https://encrypted-tbn0.gstatic.com/images"
    "?q=tbn:ANd9GcRyKLQ_NDd81udMvX8pB7D97hkZxbjehU6WzA&s"
)

# Discussion settings
DISCUSSION_CATEGORIES = (
    "general",
    "tech",
    "business",
    "entertainment",
    "sports",
    "politics",
    "other",
)
DEFAULT_DISCUSSION_CATEGORY = "general"
DEFAULT_MAX_PARTICIPANTS = 50
DEFAULT_PAGE_SIZE = 10

# Notification types
NOTIFY_FRIEND_REQUEST = "friend_request"
NOTIFY_FRIEND_ACCEPTED = "friend_accepted"
NOTIFY_NEW_MEMBER = "new_member"
NOTIFY_ADMIN_PROMOTION = "admin_promotion"
NOTIFY_ADMIN_DEMOTION = "admin_demotion"
NOTIFY_COMMUNITY_REMOVAL = "community_removal"
NOTIFY_COMMUNITY_DELETED = "community_deleted"
NOTIFY_POST_LIKE = "post_like"
NOTIFY_POST_DISLIKE = "post_dislike"
NOTIFY_POST_COMMENT = "post_comment"
NOTIFY_COMMENT_REPLY = "comment_reply"

# Live channel rooms and events
NOTIFICATION_ROOM_PREFIX = "notifications-"
DISCUSSION_ROOM_PREFIX = "discussion-"
EVENT_NEW_NOTIFICATION = "new-notification"
EVENT_NOTIFICATION_UPDATED = "notification-updated"
EVENT_NOTIFICATION_DELETED = "notification-deleted"
EVENT_NEW_MESSAGE = "new-message"
EVENT_MESSAGE_UPDATED = "message-updated"

# Fields shown when a user is embedded in another resource
PUBLIC_USER_FIELDS = ("username", "firstname", "lastname", "avatar")
PROFILE_USER_FIELDS = PUBLIC_USER_FIELDS + ("about", "livesin")

DEFAULT_TAGS = [
    "#technology",
    "#programming",
    "#gaming",
    "#art",
    "#music",
    "#fitness",
    "#books",
    "#movies",
    "#travel",
    "#food",
    "#photography",
    "#science",
    "#sports",
    "#fashion",
    "#health",
    "#education",
    "#business",
    "#politics",
    "#environment",
    "#pets",
    "#history",
    "#philosophy",
    "#coding",
    "#design",
    "#literature",
]
