"""Shared constants — single source of truth for values used across modules."""

# Archive naming
ARCHIVE_PREFIX = "zen-backup"
ARCHIVE_EXTENSION = ".tar.gz"
ARCHIVE_KINDS: tuple[str, ...] = ("daily", "weekly")

# Inclusion filter
EXCLUDED_FILE_NAMES: frozenset[str] = frozenset(
    {"cookies.sqlite", "key4.db", "logins.json", "cert9.db", ".parentlock"}
)
EXCLUDED_FILE_SUFFIXES: tuple[str, ...] = (".sqlite-wal", ".sqlite-shm", ".db-wal", ".db-shm")
EXCLUDED_DIR_PREFIXES: tuple[str, ...] = (
    "cache2/",
    "crashes/",
    "datareporting/",
    "saved-telemetry-pings/",
    "minidumps/",
    "storage/temporary/",
    "storage/default/chrome/",
)
DEFAULT_STORAGE_DIR = "storage/default"
DEFAULT_STORAGE_HTTP_PREFIX = "storage/default/http"

# SQLite
SQLITE_SUFFIXES: tuple[str, ...] = (".sqlite", ".db")
WAL_SUFFIX = "-wal"
SHM_SUFFIX = "-shm"

# Retention defaults (days)
DEFAULT_DAILY_RETENTION_DAYS = 30
DEFAULT_WEEKLY_RETENTION_DAYS = 84

# Status
STALE_DAILY_AFTER_DAYS = 3

# Files kept at the backup root
AUDIT_LOG_NAME = "backup.log"
NOTIFICATIONS_LOG_NAME = "notifications.log"

# Temp directory prefixes
BUILD_STAGING_PREFIX = "zen-backup-staging-"
RESTORE_STAGING_PREFIX = "zen-restore-staging-"
PRE_RESTORE_MARKER = ".pre-restore-"

# Environment
ENV_CONFIG_PATH = "ZEN_BACKUP_CONFIG"
ENV_BROWSER_RUNNING = "ZEN_BACKUP_BROWSER_RUNNING"
ENV_CORRUPT_SQLITE = "ZEN_BACKUP_TEST_CORRUPT_SQLITE"
ENV_FORCE_SQLITE_FALLBACK = "ZEN_BACKUP_TEST_FORCE_SQLITE_FALLBACK"
ENV_DISK_FULL = "ZEN_BACKUP_TEST_DISK_FULL"

# Messages
BROWSER_RUNNING_WARNING = (
    "browser is running; SQLite databases are safely backed up, "
    "but session files may be mid-write"
)
DISK_FULL_WARNING = "disk full while creating archive"
