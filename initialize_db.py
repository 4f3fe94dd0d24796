import os

from hrflow.cli import seed_database
from wsgi import app

with app.app_context():
    created = seed_database(
        admin_username=os.environ.get('HRFLOW_ADMIN_USERNAME', 'admin'),
        admin_password=os.environ.get('HRFLOW_ADMIN_PASSWORD', 'admin123'),
        admin_email=os.environ.get('HRFLOW_ADMIN_EMAIL', 'admin@example.com'),
    )
    if created:
        print(f"Created: {', '.join(created)}")
    else:
        print("Database already initialised")
