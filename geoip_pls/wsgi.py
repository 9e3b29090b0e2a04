from geoip_pls.app import create_app
from geoip_pls.logging_config import setup_logging

# gunicorn geoip_pls.wsgi:app
setup_logging()
app = create_app()
