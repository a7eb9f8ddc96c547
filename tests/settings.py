"""Django settings for django-fulfillment tests."""

SECRET_KEY = 'test-secret-key-do-not-use-in-production'

DEBUG = True

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django_fulfillment',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

FULFILLMENT_SITE_TITLE = 'Test Shop'
FULFILLMENT_VENDOR_URL = 'http://vendor.test/XMLService.ASP'
