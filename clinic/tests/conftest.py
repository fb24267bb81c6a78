import pytest
from rest_framework.test import APIClient

from clinic.models import PatientProfile, User

PASSWORD = 'Cl1nic-Passw0rd'


def make_user(username, role, **extra):
    u = User.objects.create_user(username=username, email=f'{username}@example.com', password=PASSWORD,
                                 role=role, **extra)
    if role == User.ROLE_STUDENT:
        PatientProfile.objects.create(user=u, student_id=f'S-{u.id:04d}')
    return u


def client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def admin_user(db):
    return make_user('admin1', User.ROLE_ADMIN, first_name='Clinic', last_name='Admin')


@pytest.fixture
def doctor(db):
    return make_user('doc1', User.ROLE_DOCTOR, first_name='Jane', last_name='Smith', staff_id='EMP-1')


@pytest.fixture
def student(db):
    return make_user('stud1', User.ROLE_STUDENT, first_name='John', last_name='Doe')


@pytest.fixture
def other_student(db):
    return make_user('stud2', User.ROLE_STUDENT, first_name='Mary', last_name='Cruz')


@pytest.fixture(autouse=True)
def _isolated_media(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.PUBLIC_BASE_URL = ''
    settings.CACHES = {'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache'}}
    settings.CHANNEL_LAYERS = {'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}}
    settings.STORAGES = {
        'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
        'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
    }
    from django.core.cache import cache
    cache.clear()
