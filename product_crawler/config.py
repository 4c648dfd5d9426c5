# product_crawler/config.py

from .models import FieldName

# Import the 'Path' object for handling file paths in a way that works on any OS (Windows, macOS, Linux)
from pathlib import Path

# --- Core Settings ---
# The semantic fields an operator can capture. Order is the order they are shown and exported in.
FIELD_NAMES = [field.value for field in FieldName]

# --- File Path Settings ---
# This line gets the path to the directory where this config.py file is located (the package directory).
PACKAGE_PATH = Path(__file__).parent
# All snapshots, stored selectors and exports are saved under 'data', one level above the package.
DATA_PATH = PACKAGE_PATH.parent / "data"
# File names used for the collaborator artifacts.
SELECTOR_STORE_NAME = "selectors.json"
CONFIG_EXPORT_NAME = "crawler-config.json"

# --- Browser/Network Settings ---
# The User-Agent string tells the website what kind of browser we are. We use a common one to avoid being blocked.
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
# The size of the virtual browser window.
VIEWPORT = {"width": 1440, "height": 900}
# The maximum time (in milliseconds) to wait for a page to load before giving up.
REQUEST_TIMEOUT = 60000 # 60 seconds
# How long (in milliseconds) the live capture browser waits for the operator to click an element.
CAPTURE_TIMEOUT = 300000 # 5 minutes
