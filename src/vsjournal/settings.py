"""Fixed settings for vsjournal."""

from pathlib import Path

APP_NAME = "VSJournal"

# Journal root, overridable only through the CLI --root option
DEFAULT_ROOT = Path.home() / APP_NAME

JOURNALS_DIR_NAME = "journals"
NOTES_DIR_NAME = "notes"

REMOTE_NAME = "origin"
PRIMARY_BRANCH = "master"
SYNC_COMMIT_MESSAGE = "Sync to Remote"

# Exit status git push returns when there is nothing to push
PUSH_UP_TO_DATE_STATUS = 128
