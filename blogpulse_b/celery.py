import os
from celery import Celery
from celery.schedules import schedule


os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'blogpulse_b.settings')
app = Celery('blogpulse_b')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()



# Define all beat schedules in one dictionary
app.conf.beat_schedule = {
    # ✅ Drop stale pending reaction operations (Every minute)
    'cleanup-old-reaction-queues-every-minute': {
        'task': 'apps.reactions.tasks.cleanup_old_reaction_queues',
        'schedule': schedule(run_every=int(os.getenv('REACTION_QUEUE_CLEANUP_INTERVAL', '60'))),
    },
}



# celery -A blogpulse_b worker -l info
# celery -A blogpulse_b beat -l info
