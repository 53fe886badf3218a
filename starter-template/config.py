import os
from dotenv import load_dotenv

load_dotenv()

IS_PRODUCTION = (
    os.getenv('ENVIRONMENT') == 'production' or
    os.getenv('FLASK_ENV') == 'production' or
    os.getenv('PRODUCTION') == '1'
)


class Config:
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    BRAND_NAME = 'My Quillboard Site'

    # Bootstrap secret for the first admin (POST /init)
    INIT_ADMIN_SECRET_KEY = os.getenv('INIT_ADMIN_SECRET_KEY', '')

    # Document store
    DOCUMENT_STORE = os.getenv('DOCUMENT_STORE', 'mongodb' if IS_PRODUCTION else 'memory')
    MONGODB_URI = os.getenv('MONGODB_URI', 'mongodb://localhost:27017')
    MONGODB_DATABASE = os.getenv('MONGODB_DATABASE', 'quillboard')
