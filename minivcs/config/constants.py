"""Hard-coded constants not meant to be user-configurable."""

from datetime import UTC, datetime

METADATA_DIR_NAME = ".minivcs"
OBJECTS_DIR_NAME = "objects"
COMMITS_DIR_NAME = "commits"
INDEX_FILE_NAME = "index.json"
BRANCHES_FILE_NAME = "branches.json"
HEAD_FILE_NAME = "HEAD"
CONFIG_FILE_NAME = "config.json"

# Objects live under <root>/<id[:BUCKET_PREFIX_LENGTH]>/<id>
BUCKET_PREFIX_LENGTH = 2

# Timestamp of every root commit
EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
