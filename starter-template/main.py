"""
My Quillboard Site
==================

Flask app using the Quillboard dashboard.
"""

import logging

from flask import Flask, redirect, url_for

from config import Config, IS_PRODUCTION

logging.basicConfig(level=logging.INFO)

# ===== App Setup =====

app = Flask(__name__)

app.config['SECRET_KEY'] = Config.SECRET_KEY
app.config['INIT_ADMIN_SECRET_KEY'] = Config.INIT_ADMIN_SECRET_KEY or None
app.config['DOCUMENT_STORE'] = Config.DOCUMENT_STORE
app.config['MONGODB_URI'] = Config.MONGODB_URI
app.config['MONGODB_DATABASE'] = Config.MONGODB_DATABASE

# Session security
app.config['SESSION_COOKIE_SECURE'] = IS_PRODUCTION
app.config['SESSION_COOKIE_HTTPONLY'] = True
app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

# ===== Quillboard =====

from quillboard import Quillboard
quillboard = Quillboard(app, {'brand_name': Config.BRAND_NAME})


# ===== Routes =====

@app.route('/')
def home():
    """Send visitors to the dashboard"""
    return redirect(url_for('posts.list_posts'))


# ===== Run =====

if __name__ == '__main__':
    print("\n" + "=" * 60)
    print(Config.BRAND_NAME)
    print("=" * 60)
    print("Dashboard:       http://localhost:5000/posts/")
    print("Sign in:         http://localhost:5000/login")
    print("Create admin:    POST http://localhost:5000/init")
    print("=" * 60 + "\n")

    app.run(debug=True, port=5000, host='0.0.0.0')
