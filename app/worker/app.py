### app/worker/app.py

"""
Main Celery Application Configuration

Sets up the Celery application used when exports are dispatched to a
worker (EXPORT_TASK_BACKEND=celery). The worker must share the exports
directory with the API.

Start a worker with: celery -A app.worker.app worker --loglevel=info
"""

# Third party imports
from celery import Celery

# Import models so they are registered with SQLAlchemy before tasks run
import app.youth.models  # noqa: F401

# Create Celery Instance
app = Celery("youth_exports")

# Configure celery from separate config file
app.config_from_object("app.worker.config")

# Auto discover tasks from different modules
# This will look for tasks.py files in specified modules/packages
app.autodiscover_tasks(["app.exports"])

if __name__ == "__main__":
    app.start()
