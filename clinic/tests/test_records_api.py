"""
Integration tests for medical records, health metrics and certificates.

These exercise BMI handling at the API boundary (numeric strings,
sentinels, the certificate default) together with the access rules
between students and clinic personnel.
"""
from django.urls import reverse
from rest_framework.test import APITestCase

from ..models import AuditEvent, MedicalRecord, User
from .conftest import client_for, make_user


class MedicalRecordAPITests(APITestCase):
    def setUp(self) -> None:
        self.doctor = make_user('doc1', User.ROLE_DOCTOR, first_name='Jane', last_name='Smith')
        self.student = make_user('stud1', User.ROLE_STUDENT, first_name='John', last_name='Doe')
        self.other = make_user('stud2', User.ROLE_STUDENT)
        self.doc_client = client_for(self.doctor)
        self.stud_client = client_for(self.student)

    def _create(self, client, **payload):
        return client.post(reverse('medical_records'), payload, format='json')

    def test_create_computes_bmi_and_enables_certificate_for_normal(self):
        r = self._create(self.doc_client, patientId=self.student.id, date='2024-03-01',
                         height='175', weight='70', diagnosis='<b>ok</b>', medications=['Paracetamol'])
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data['bmi'], 22.86)
        self.assertEqual(r.data['bmiCategory'], 'Normal weight')
        self.assertEqual(r.data['bmiColor'], 'green')
        self.assertTrue(r.data['certificateEnabled'])
        self.assertEqual(r.data['doctorId'], self.doctor.id)
        self.assertEqual(r.data['diagnosis'], 'ok')
        self.assertEqual(r.data['medications'], ['Paracetamol'])
        self.assertTrue(AuditEvent.objects.filter(action='record_create', object_id=r.data['id']).exists())

    def test_create_keeps_supplied_positive_bmi(self):
        r = self._create(self.doc_client, patientId=self.student.id, height=175, weight=70, bmi='31.234')
        self.assertEqual(r.data['bmi'], 31.23)
        self.assertEqual(r.data['bmiCategory'], 'Obesity')
        self.assertFalse(r.data['certificateEnabled'])

    def test_missing_measurements_store_sentinel_without_category(self):
        r = self._create(self.doc_client, patientId=self.student.id, height=0, weight=70,
                         certificateEnabled=True)
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data['bmi'], 0.0)
        self.assertIsNone(r.data['bmiCategory'])
        self.assertIsNone(r.data['bmiColor'])
        self.assertFalse(r.data['certificateEnabled'])

    def test_student_self_records_without_doctor(self):
        r = self._create(self.stud_client, height=160, weight=45, vitalSigns={'heartRate': 72})
        self.assertEqual(r.status_code, 201)
        self.assertEqual(r.data['patientId'], self.student.id)
        self.assertIsNone(r.data['doctorId'])
        self.assertTrue(r.data['selfRecorded'])
        self.assertEqual(r.data['vitalSigns']['heartRate'], 72)
        self.assertEqual(r.data['bmiColor'], 'blue')

        forbidden = self._create(self.stud_client, patientId=self.other.id, height=160, weight=50)
        self.assertEqual(forbidden.status_code, 403)

    def test_clinical_create_requires_known_student(self):
        self.assertEqual(self._create(self.doc_client, height=170, weight=60).status_code, 400)
        self.assertEqual(self._create(self.doc_client, patientId=9999, height=170, weight=60).status_code, 400)

    def test_students_only_see_their_own_records(self):
        self._create(self.doc_client, patientId=self.student.id, height=170, weight=60)
        mine = self._create(self.doc_client, patientId=self.other.id, height=170, weight=60).data
        self.assertEqual(len(self.stud_client.get(reverse('medical_records')).data), 1)
        self.assertEqual(len(self.doc_client.get(reverse('medical_records')).data), 2)
        r = self.stud_client.get(reverse('medical_record_detail', args=[mine['id']]))
        self.assertEqual(r.status_code, 403)
        r = self.stud_client.get(reverse('patient_records', args=[self.other.id]))
        self.assertEqual(r.status_code, 403)

    def test_records_are_listed_newest_first(self):
        self._create(self.doc_client, patientId=self.student.id, date='2024-01-01', height=170, weight=60)
        self._create(self.doc_client, patientId=self.student.id, date='2024-05-01', height=170, weight=62)
        r = self.doc_client.get(reverse('patient_records', args=[self.student.id]))
        self.assertEqual([x['date'] for x in r.data], ['2024-05-01', '2024-01-01'])

    def test_update_recomputes_bmi_and_accepts_string_flags(self):
        rec = self._create(self.doc_client, patientId=self.student.id, height=175, weight=70,
                           medications=['A', 'B']).data
        url = reverse('medical_record_detail', args=[rec['id']])
        r = self.doc_client.put(url, {'weight': '95'}, format='json')
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['bmi'], 31.02)
        self.assertEqual(r.data['height'], 175)
        self.assertFalse(r.data['certificateEnabled'])

        r = self.doc_client.put(url, {'certificateEnabled': 'true', 'medications': ['C'],
                                      'vitalSigns': {'bloodPressure': '120/80'}}, format='json')
        self.assertTrue(r.data['certificateEnabled'])
        self.assertEqual(r.data['medications'], ['C'])
        self.assertEqual(r.data['vitalSigns']['bloodPressure'], '120/80')

        r = self.doc_client.put(url, {'certificateEnabled': 0}, format='json')
        self.assertFalse(r.data['certificateEnabled'])

    def test_delete_removes_record(self):
        rec = self._create(self.doc_client, patientId=self.student.id, height=175, weight=70,
                           medications=['A']).data
        r = self.doc_client.delete(reverse('medical_record_detail', args=[rec['id']]))
        self.assertEqual(r.status_code, 200)
        self.assertFalse(MedicalRecord.objects.filter(pk=rec['id']).exists())

    def test_health_metrics_trend(self):
        self._create(self.doc_client, patientId=self.student.id, date='2024-01-01', height=170, weight=48)
        self._create(self.doc_client, patientId=self.student.id, date='2024-03-01', height=170, weight=51)
        r = self.stud_client.get(reverse('patient_health_metrics', args=[self.student.id]))
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.data['trend'], 'increasing')
        self.assertEqual(r.data['trendIcon'], 'arrow-up')
        self.assertEqual(r.data['latest']['category'], 'underweight')
        self.assertEqual(r.data['trendColor'], 'green')
        self.assertEqual([h['date'] for h in r.data['history']], ['2024-01-01', '2024-03-01'])

    def test_health_metrics_without_records(self):
        r = self.doc_client.get(reverse('patient_health_metrics', args=[self.student.id]))
        self.assertEqual(r.data['trend'], 'unknown')
        self.assertEqual(r.data['trendColor'], 'gray')
        self.assertFalse(r.data['latest']['valid'])

    def test_bmi_calculator(self):
        r = self.stud_client.post(reverse('bmi_calculator'), {'height': '175', 'weight': 70}, format='json')
        self.assertEqual(r.data['bmi'], 22.9)
        self.assertEqual(r.data['category'], 'normal')
        r = self.stud_client.post(reverse('bmi_calculator'), {'height': 0, 'weight': 70}, format='json')
        self.assertFalse(r.data['valid'])
        r = self.stud_client.post(reverse('bmi_calculator'), {'height': 'tall', 'weight': 70}, format='json')
        self.assertEqual(r.status_code, 400)


class CertificateTests(APITestCase):
    def setUp(self) -> None:
        self.doctor = make_user('doc1', User.ROLE_DOCTOR, first_name='Jane', last_name='Smith')
        self.student = make_user('stud1', User.ROLE_STUDENT, first_name='John', last_name='Doe')
        self.client_doc = client_for(self.doctor)

    def _record(self, **payload):
        r = self.client_doc.post(reverse('medical_records'), {'patientId': self.student.id, **payload},
                                 format='json')
        return r.data['id']

    def test_certificate_renders_for_enabled_normal_record(self):
        rid = self._record(height=175, weight=70, date='2024-02-10')
        r = client_for(self.student).get(reverse('bmi_certificate', args=[rid]))
        self.assertEqual(r.status_code, 200)
        html = r.content.decode()
        self.assertIn('John Doe', html)
        self.assertIn('22.9', html)
        self.assertIn('Normal weight', html)
        self.assertIn('OLIVAREZ CLINIC', html)

    def test_certificate_refused_when_disabled(self):
        rid = self._record(height=175, weight=100)
        r = self.client_doc.get(reverse('bmi_certificate', args=[rid]))
        self.assertEqual(r.status_code, 400)

    def test_certificate_forbidden_for_other_students(self):
        rid = self._record(height=175, weight=70)
        other = make_user('stud2', User.ROLE_STUDENT)
        r = client_for(other).get(reverse('bmi_certificate', args=[rid]))
        self.assertEqual(r.status_code, 403)
