import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from clinic.models import AuditEvent, User
from .conftest import PASSWORD, client_for

pytestmark = pytest.mark.django_db


def login(client, username, password):
    return client.post(reverse('login_view'), {'username': username, 'password': password}, format='json')


def test_login_returns_jwt_and_legacy_token(student):
    r = login(APIClient(), 'stud1', PASSWORD)
    assert r.status_code == 200
    assert r.data['token']
    assert r.data['jwt_access'] and r.data['jwt_refresh']
    assert r.data['role'] == 'student'
    assert r.data['user']['name'] == 'John Doe'
    assert AuditEvent.objects.filter(action='login', user=student, detail__result='ok').exists()


def test_login_accepts_email(student):
    r = login(APIClient(), 'stud1@example.com', PASSWORD)
    assert r.status_code == 200
    assert r.data['user']['id'] == student.id


def test_no_role_bypass_in_login(student):
    r = APIClient().post(reverse('login_view'),
                         {'username': 'stud1', 'password': PASSWORD, 'role': 'admin'}, format='json')
    assert r.status_code == 200
    student.refresh_from_db()
    assert student.role == 'student'


def test_bad_password_is_rejected_and_audited(student):
    r = login(APIClient(), 'stud1', 'nope')
    assert r.status_code == 400
    assert r.data['ok'] is False
    assert AuditEvent.objects.filter(action='login', detail__result='fail').exists()


def test_token_and_jwt_authenticate_profile(student):
    r = login(APIClient(), 'stud1', PASSWORD)
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Token {r.data['token']}")
    assert c.get(reverse('current_profile')).data['id'] == student.id
    c = APIClient()
    c.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    profile = c.get(reverse('current_profile')).data
    assert profile['profile']['studentId'] == student.patient_profile.student_id


def test_refresh_and_logout(student):
    r = login(APIClient(), 'stud1', PASSWORD)
    refresh = r.data['jwt_refresh']
    c = APIClient()
    rr = c.post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert rr.status_code == 200
    assert rr.data['jwt_access']

    c.credentials(HTTP_AUTHORIZATION=f"Bearer {r.data['jwt_access']}")
    out = c.post(reverse('jwt_logout'), {'refresh': refresh}, format='json')
    assert out.status_code == 200 and out.data['blacklisted'] == 1
    again = APIClient().post(reverse('jwt_refresh'), {'refresh': refresh}, format='json')
    assert again.status_code == 401


def test_anonymous_requests_are_rejected():
    r = APIClient().get(reverse('medical_records'))
    assert r.status_code in (401, 403)
    assert r.data['ok'] is False


def test_register_student():
    payload = {
        'name': 'Ana Reyes', 'email': 'ana@example.com', 'password': 'Sup3r-Secret-99',
        'studentId': '2024-0001', 'gender': 'female', 'dateOfBirth': '2004-05-06',
    }
    r = APIClient().post(reverse('register_view'), payload, format='json')
    assert r.status_code == 201
    u = User.objects.get(email='ana@example.com')
    assert u.role == 'student'
    assert u.patient_profile.student_id == '2024-0001'
    assert r.data['user']['profile']['age'] is not None


def test_register_requires_student_id_and_strong_password():
    c = APIClient()
    r = c.post(reverse('register_view'), {'name': 'Ana', 'email': 'a@example.com', 'password': 'Sup3r-Secret-99'},
               format='json')
    assert r.status_code == 400
    r = c.post(reverse('register_view'), {'name': 'Ana', 'email': 'a@example.com', 'password': '123',
                                          'studentId': 'X1'}, format='json')
    assert r.status_code == 400
    assert not User.objects.filter(email='a@example.com').exists()


def test_users_list_is_clinical_only(admin_user, student):
    assert client_for(student).get(reverse('users')).status_code == 403
    r = client_for(admin_user).get(reverse('users'))
    assert r.status_code == 200
    assert {u['username'] for u in r.data} == {'admin1', 'stud1'}


def test_admin_creates_users_with_required_ids(admin_user):
    c = client_for(admin_user)
    base = {'email': 'nurse@example.com', 'name': 'Head Nurse', 'password': 'Sup3r-Secret-99'}
    assert c.post(reverse('users'), {**base, 'role': 'staff'}, format='json').status_code == 400
    r = c.post(reverse('users'), {**base, 'role': 'staff', 'staffId': 'EMP-9'}, format='json')
    assert r.status_code == 201
    assert r.data['staffId'] == 'EMP-9'
    dup = c.post(reverse('users'), {**base, 'role': 'staff', 'staffId': 'EMP-10'}, format='json')
    assert dup.status_code == 409


def test_users_by_role(doctor, student):
    c = client_for(doctor)
    r = c.get(reverse('users_by_role', args=['student']))
    assert [u['id'] for u in r.data] == [student.id]
    assert c.get(reverse('users_by_role', args=['wizard'])).status_code == 400


def test_user_detail_permissions(admin_user, student, other_student):
    assert client_for(student).get(reverse('user_detail', args=[other_student.id])).status_code == 403
    assert client_for(student).get(reverse('user_detail', args=[student.id])).status_code == 200
    assert client_for(admin_user).get(reverse('user_detail', args=[9999])).status_code == 404

    r = client_for(student).put(reverse('user_detail', args=[student.id]),
                                {'phone': '0917', 'role': 'admin'}, format='json')
    assert r.status_code == 200
    student.refresh_from_db()
    assert student.phone == '0917' and student.role == 'student'

    assert client_for(student).delete(reverse('user_detail', args=[other_student.id])).status_code == 403
    assert client_for(admin_user).delete(reverse('user_detail', args=[other_student.id])).status_code == 200
    assert not User.objects.filter(pk=other_student.id).exists()


def test_doctor_cannot_change_other_accounts_credentials(admin_user, doctor, student):
    c = client_for(doctor)
    url = reverse('user_detail', args=[admin_user.id])
    assert c.put(url, {'password': 'Hijacked-Passw0rd!'}, format='json').status_code == 403
    assert c.put(url, {'email': 'doc@example.com'}, format='json').status_code == 403
    admin_user.refresh_from_db()
    assert admin_user.check_password(PASSWORD)
    assert admin_user.email != 'doc@example.com'

    assert c.put(url, {'phone': '0918'}, format='json').status_code == 200
    admin_user.refresh_from_db()
    assert admin_user.phone == '0918'

    r = client_for(student).put(reverse('user_detail', args=[student.id]),
                                {'password': 'Fresh-Passw0rd!'}, format='json')
    assert r.status_code == 200
    student.refresh_from_db()
    assert student.check_password('Fresh-Passw0rd!')


def test_calculate_age_handles_birthdays():
    from datetime import date
    from clinic.services.patients import calculate_age
    assert calculate_age(date(2000, 6, 15), today=date(2024, 6, 14)) == 23
    assert calculate_age(date(2000, 6, 15), today=date(2024, 6, 15)) == 24
    assert calculate_age(None) is None


def test_ensure_sample_users_is_idempotent():
    from django.core.management import call_command
    call_command('ensure_sample_users')
    call_command('ensure_sample_users')
    assert User.objects.filter(role='doctor').count() == 1
    assert User.objects.get(email='john.doe@example.com').patient_profile.student_id
