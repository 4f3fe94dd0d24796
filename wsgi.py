import os
import socket

from hrflow import create_app
from hrflow.models import db

app = create_app()


def get_local_ip():
    network_ip = "127.0.0.1"
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.settimeout(2)
            s.connect(("8.8.8.8", 80))
            network_ip = s.getsockname()[0]
    except OSError:
        pass  # Keep 127.0.0.1 if detection fails
    return network_ip


if __name__ == '__main__':
    with app.app_context():
        # Only create tables on an empty database
        if not db.inspect(db.engine).get_table_names():
            print("Creating database tables...")
            db.create_all()

    if os.path.exists('/.dockerenv') or os.environ.get('FLASK_ENV') == 'production':
        print("=== HRFlow - Production Mode ===")
        print("Host: 0.0.0.0, Port: 8888")
        print(f"Database URI: {app.config.get('SQLALCHEMY_DATABASE_URI', 'Not set')}")
        app.run(host='0.0.0.0', port=8888, debug=False)
    else:
        network_ip = get_local_ip()
        print("=" * 50)
        print("HRFlow - Development Mode")
        print("Local:    http://127.0.0.1:8888")
        print(f"Network:  http://{network_ip}:8888")
        print("=" * 50)
        app.run(debug=True, host='0.0.0.0', port=8888)
