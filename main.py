import atexit

from app import create_app
from blueprints.captcha import close_captcha

app = create_app()
atexit.register(close_captcha, app)

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000)
