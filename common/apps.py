from django.apps import AppConfig
import logging
import os
import sys

logger = logging.getLogger(__name__)


class CommonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'common'

    def ready(self):
        """
        Initialize background scheduler when Django app is ready.
        Only start scheduler in the main process (not in migrations, tests, or worker processes).
        """
        if os.environ.get('RUN_MAIN') != 'true':
            return

        if len(sys.argv) > 1 and sys.argv[1] in ['migrate', 'makemigrations', 'test', 'collectstatic']:
            return

        from django.conf import settings
        if getattr(settings, 'ENABLE_BACKGROUND_SCHEDULER', True):
            from .scheduler import start_scheduler
            start_scheduler()
            logger.info("Background task scheduler initialized")
