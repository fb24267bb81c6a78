import pytest
from django.urls import reverse

from clinic.models import Appointment
from clinic.services.appointments import generate_time_slots
from .conftest import client_for

pytestmark = pytest.mark.django_db


def book(client, student, doctor, **extra):
    payload = {
        'patientId': student.id, 'doctorId': doctor.id, 'date': '2030-05-06',
        'startTime': '09:00', 'endTime': '09:30', 'reason': 'Annual check-up', **extra,
    }
    return client.post(reverse('appointments'), payload, format='json')


def test_generate_time_slots():
    slots = generate_time_slots(8, 17, 30)
    assert slots[0] == '08:00' and slots[-1] == '16:30'
    assert len(slots) == 18
    assert generate_time_slots(9, 10, 15) == ['09:00', '09:15', '09:30', '09:45']


def test_student_books_for_self_only(student, other_student, doctor):
    c = client_for(student)
    r = book(c, student, doctor)
    assert r.status_code == 201
    assert r.data['status'] == 'scheduled'
    assert r.data['doctorName'] == 'Jane Smith'
    assert book(c, other_student, doctor).status_code == 403


def test_validation_errors(student, doctor):
    c = client_for(doctor)
    assert book(c, student, doctor, endTime='08:30').status_code == 400
    assert book(c, student, doctor, doctorId=student.id).status_code == 400
    r = c.post(reverse('appointments'), {'patientId': student.id}, format='json')
    assert r.status_code == 400
    assert r.data['ok'] is False


def test_listing_and_scoping(student, other_student, doctor):
    c = client_for(doctor)
    book(c, student, doctor, date='2030-05-07')
    book(c, student, doctor, date='2030-05-06', startTime='13:00', endTime='13:30')
    book(c, other_student, doctor)
    all_rows = c.get(reverse('appointments')).data
    assert len(all_rows) == 3
    assert [a['date'] for a in all_rows] == sorted(a['date'] for a in all_rows)

    mine = client_for(student).get(reverse('appointments')).data
    assert {a['patientId'] for a in mine} == {student.id}
    assert client_for(student).get(reverse('patient_appointments', args=[other_student.id])).status_code == 403
    assert len(c.get(reverse('doctor_appointments', args=[doctor.id])).data) == 3


def test_update_and_delete(student, doctor):
    c = client_for(doctor)
    appt = book(c, student, doctor).data
    url = reverse('appointment_detail', args=[appt['id']])
    r = c.put(url, {'status': 'completed', 'notes': 'fit'}, format='json')
    assert r.status_code == 200 and r.data['status'] == 'completed'
    assert c.put(url, {'endTime': '08:00'}, format='json').status_code == 400
    assert c.delete(url).status_code == 200
    assert not Appointment.objects.filter(pk=appt['id']).exists()


def test_free_slots_exclude_scheduled_overlaps(student, doctor):
    c = client_for(doctor)
    book(c, student, doctor, startTime='09:00', endTime='10:00')
    book(c, student, doctor, startTime='11:15', endTime='11:45', status='cancelled')
    r = c.get(reverse('appointment_slots'), {'doctorId': doctor.id, 'date': '2030-05-06'})
    assert r.status_code == 200
    starts = [s['startTime'] for s in r.data['slots']]
    assert '09:00' not in starts and '09:30' not in starts
    assert '08:30' in starts and '10:00' in starts
    assert '11:00' in starts and '11:30' in starts
    assert len(starts) == 16
    assert c.get(reverse('appointment_slots'), {'date': '2030-05-06'}).status_code == 400
