"""
Flask Extensions
Centralized extension initialization
"""
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS

# Initialize extensions (without app binding)
db = SQLAlchemy()
cors = CORS()
