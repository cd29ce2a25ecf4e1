# api/preview.py

from http.server import BaseHTTPRequestHandler

from rpg_card.handlers import respond_with_preview
from rpg_card.log import configure_logging

configure_logging()


class handler(BaseHTTPRequestHandler):
    def do_GET(self):
        respond_with_preview(self)
