# mockup_preview/extensions.py
from flask_cors import CORS
from dotenv import load_dotenv

from .config import Config
from .storage.template_store import TemplateStore
from .services.raster_loader import RasterLoader

# Load env just once here
load_dotenv()

cors = CORS()

store = TemplateStore(Config.DATA_DIR)

# Relative template paths resolve against the local templates folder
raster_loader = RasterLoader(timeout=Config.IMAGE_FETCH_TIMEOUT, base_dir=Config.TEMPLATES_DIR)
