"""Roam property keys and fixed block texts written by todoist-backup."""

ID_PROPERTY = "todoist-id"
DUE_PROPERTY = "todoist-due"
DESCRIPTION_PROPERTY = "todoist-desc"
LABELS_PROPERTY = "todoist-labels"
COMPLETED_PROPERTY = "todoist-completed"
STATUS_PROPERTY = "todoist-status"
COMMENTS_PROPERTY = "todoist-comments"
COMMENT_ID_PROPERTY = "todoist-comment-id"
COMMENT_POSTED_PROPERTY = "todoist-comment-posted"

COMMENTS_HEADER = "comments..."
NO_DUE_DATE = "No due date"
UNTITLED_TASK = "Untitled task"
DEFAULT_PROJECT = "Inbox"

# Sentinel child written by older versions on pages without tasks.
PLACEHOLDER_CONTENT = "No tasks found"
