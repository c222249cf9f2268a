# Entry point for `flask --app wsgi run` and WSGI servers.
from bakery import create_app

app = create_app()
