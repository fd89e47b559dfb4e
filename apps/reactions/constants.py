# apps/reactions/constants.py
from django.conf import settings


# REACTION TYPE Choices ----------------------------------------------------------------------------
LIKE = 'like'
LOVE = 'love'
LAUGH = 'laugh'
SURPRISED = 'surprised'
SAD = 'sad'
REACTION_TYPE_CHOICES = [
    (LIKE, 'Like'),
    (LOVE, 'Love'),
    (LAUGH, 'Laugh'),
    (SURPRISED, 'Surprised'),
    (SAD, 'Sad'),
]
REACTION_TYPES = tuple(code for code, _ in REACTION_TYPE_CHOICES)

# Request-only sentinel, never stored
REMOVE = 'remove'


# Pending Operation Kinds --------------------------------------------------------------------------
OP_CREATE = 'create'
OP_UPDATE = 'update'
OP_DELETE = 'delete'
OP_NONE = 'none'
QUEUED_OPERATIONS = (OP_CREATE, OP_UPDATE, OP_DELETE)


# Tuning (override in settings) --------------------------------------------------------------------
def cache_ttl() -> int:
    return int(getattr(settings, "REACTION_CACHE_TTL", 3600))


def batch_size() -> int:
    return int(getattr(settings, "REACTION_BATCH_SIZE", 100))


def bulk_update_delay() -> int:
    return int(getattr(settings, "REACTION_BULK_UPDATE_DELAY", 30))


def processing_lock_ttl() -> int:
    return int(getattr(settings, "REACTION_PROCESSING_LOCK_TTL", 300))


def queue_retention() -> int:
    return int(getattr(settings, "REACTION_QUEUE_RETENTION", 300))


def queue_ttl() -> int:
    # queue must outlive the scheduled reconciliation
    return bulk_update_delay() + 60
