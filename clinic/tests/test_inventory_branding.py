import base64

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, Logo, Medicine, SiteSetting, User
from clinic.services.branding import image_extension
from .conftest import client_for, make_user

pytestmark = pytest.mark.django_db

PNG = base64.b64decode(
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=='
)


@pytest.fixture
def head_nurse(db):
    return make_user('nurse1', User.ROLE_HEAD_NURSE)


MEDICINE = {'name': 'Paracetamol', 'category': 'Analgesic', 'quantity': 5, 'threshold': 10, 'unit': 'tablets'}


def test_medicine_crud_and_low_stock(head_nurse, doctor):
    c = client_for(head_nurse)
    r = c.post(reverse('medicines'), MEDICINE, format='json')
    assert r.status_code == 201
    assert r.data['lowStock'] is True
    mid = r.data['id']

    r = c.put(reverse('medicine_detail', args=[mid]), {'quantity': 50}, format='json')
    assert r.data['lowStock'] is False and r.data['name'] == 'Paracetamol'
    assert AuditEvent.objects.filter(action='medicine_update', object_id=str(mid)).exists()

    assert client_for(doctor).get(reverse('medicines')).status_code == 200
    assert client_for(doctor).post(reverse('medicines'), MEDICINE, format='json').status_code == 403

    assert c.delete(reverse('medicine_detail', args=[mid])).status_code == 200
    assert not Medicine.objects.exists()


def test_medicine_validation_and_student_access(head_nurse, student):
    c = client_for(head_nurse)
    assert c.post(reverse('medicines'), {**MEDICINE, 'quantity': -1}, format='json').status_code == 400
    assert client_for(student).get(reverse('medicines')).status_code == 403


def test_medicines_ordered_by_name(head_nurse):
    c = client_for(head_nurse)
    for name in ('Zinc', 'Amoxicillin', 'Ibuprofen'):
        c.post(reverse('medicines'), {**MEDICINE, 'name': name}, format='json')
    assert [m['name'] for m in c.get(reverse('medicines')).data] == ['Amoxicillin', 'Ibuprofen', 'Zinc']


def test_branding_defaults_are_public():
    r = APIClient().get(reverse('branding_settings'))
    assert r.status_code == 200
    assert r.data['clinicName'] == 'OLIVAREZ CLINIC'
    assert r.data['tagline'] == 'Health at Your Fingertips'
    assert SiteSetting.objects.filter(type='branding').exists()


def test_branding_update_stores_data_url_images(admin_user, settings):
    data_url = 'data:image/png;base64,' + base64.b64encode(PNG).decode()
    c = client_for(admin_user)
    r = c.post(reverse('branding_settings'), {'clinicName': 'Campus Clinic', 'primaryLogo': data_url},
               format='json')
    assert r.status_code == 200
    logo_url = r.data['data']['primaryLogo']
    assert logo_url.startswith('/media/uploads/primary-logo-') and logo_url.endswith('.png')
    stored = settings.MEDIA_ROOT / logo_url[len('/media/'):]
    assert stored.read_bytes() == PNG
    assert APIClient().get(reverse('branding_settings')).data['clinicName'] == 'Campus Clinic'


def test_image_extension_follows_mime_type():
    assert image_extension('png') == 'png'
    assert image_extension('SVG+XML') == 'svg'
    assert image_extension('x-made.up') == 'xmadeup'


def test_branding_svg_logo_gets_svg_extension(admin_user, settings):
    svg = b'<svg xmlns="http://www.w3.org/2000/svg"/>'
    data_url = 'data:image/svg+xml;base64,' + base64.b64encode(svg).decode()
    r = client_for(admin_user).post(reverse('branding_settings'), {'secondaryLogo': data_url}, format='json')
    assert r.status_code == 200
    logo_url = r.data['data']['secondaryLogo']
    assert logo_url.startswith('/media/uploads/secondary-logo-') and logo_url.endswith('.svg')
    assert (settings.MEDIA_ROOT / logo_url[len('/media/'):]).read_bytes() == svg


def test_branding_rejects_bad_data_url_and_non_admins(admin_user, student):
    r = client_for(admin_user).post(reverse('branding_settings'),
                                    {'primaryLogo': 'data:image/png;base64,***'}, format='json')
    assert r.status_code == 400
    assert client_for(student).post(reverse('branding_settings'), {'tagline': 'x'}, format='json').status_code == 403


def test_logo_upload_and_replace(admin_user, settings):
    settings.PUBLIC_BASE_URL = 'https://clinic.example.edu'
    c = client_for(admin_user)
    first = SimpleUploadedFile('logo.png', PNG, content_type='image/png')
    r = c.post(reverse('logos'), {'primaryLogo': first}, format='multipart')
    assert r.status_code == 201
    url = r.data['logos']['primary']['url']
    assert url.startswith('https://clinic.example.edu/media/uploads/assets/logos/logo-primary-')
    old_name = Logo.objects.get(position='primary').file.name

    second = SimpleUploadedFile('logo2.png', PNG, content_type='image/png')
    c.post(reverse('logos'), {'primaryLogo': second}, format='multipart')
    assert Logo.objects.filter(position='primary').count() == 1
    assert not (settings.MEDIA_ROOT / old_name).exists()

    r = APIClient().get(reverse('logo_detail', args=['primary']))
    assert r.status_code == 200 and r.data['position'] == 'primary'
    assert APIClient().get(reverse('logo_detail', args=['secondary'])).status_code == 404


def test_logo_upload_rejects_non_images_and_oversize(admin_user, settings):
    c = client_for(admin_user)
    txt = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
    assert c.post(reverse('logos'), {'primaryLogo': txt}, format='multipart').status_code == 400
    settings.LOGO_MAX_MB = 0
    img = SimpleUploadedFile('logo.png', PNG, content_type='image/png')
    assert c.post(reverse('logos'), {'secondaryLogo': img}, format='multipart').status_code == 400
    assert c.post(reverse('logos'), {}, format='multipart').status_code == 400
    assert not Logo.objects.exists()
