# Blueprint imports for the reCAPTCHA integration

from .captcha import captcha_required, close_captcha, get_captcha, init_captcha
