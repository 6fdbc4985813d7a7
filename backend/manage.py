"""
Convenience entry point for the Flask CLI:
    python manage.py run
    python manage.py shell
    flask db upgrade (with FLASK_APP=wsgi.py)
    flask deliveries simulate | flask returns check-overdue | flask payments expire
"""

from flask.cli import main

if __name__ == "__main__":
    main()
