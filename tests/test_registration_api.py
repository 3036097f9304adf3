"""
Registration endpoint tests
"""
import asyncio

import pytest

from app.models.registration import Registration
from app.services import registration as registration_service
from app.utils.hashing import hash_file
from conftest import documents, pdf_document, registration_form, stored_uploads


def test_register_success(register, db_session, notifier, exporter):
    form = registration_form(email='Leader.One@Gmail.com')
    response = register(form)

    assert response.status_code == 200
    body = response.json()
    assert body['registrationId'] == form['registrationId']
    assert body['emailSent'] is True
    assert body['message'] == 'Registration successful. Please check your email to confirm.'
    assert body['data']['teamName'] == form['teamName']
    assert body['data']['email'] == 'leader.one@gmail.com'
    assert body['data']['teamSize'] == 3
    assert body['data']['isConfirmed'] is False
    assert body['data']['aadharImage'].endswith('aadhar.pdf')
    assert 'createdAt' in body['data']

    record = db_session.query(Registration).filter_by(registration_id=form['registrationId']).one()
    assert record.is_confirmed is False
    assert len(record.aadhar_image_hash) == 64
    assert notifier.sent == [form['registrationId']]
    assert exporter.refreshes == 1
    assert len(stored_uploads()) == 2


def test_same_team_same_event_is_rejected(register, db_session):
    first = register(registration_form(teamName='Alpha', event='robo-race'))
    assert first.status_code == 200
    assert first.json()['registrationId']

    second = register(registration_form(teamName='Alpha', event='robo-race'))

    assert second.status_code == 400
    assert second.json() == {'error': "Team 'Alpha' is already registered for 'robo-race'"}
    assert db_session.query(Registration).count() == 1


def test_same_team_name_other_event_is_rejected(register):
    assert register(registration_form(teamName='Alpha', event='robo-race')).status_code == 200

    response = register(registration_form(teamName='Alpha', event='dance'))

    assert response.status_code == 400
    assert response.json() == {'error': 'teamName already exists'}


def test_reused_aadhar_document_is_rejected(register, notifier):
    content = b'%PDF-1.4 same physical card'
    assert register(files=documents(aadhar=('card.pdf', content, 'application/pdf'))).status_code == 200

    response = register(files=documents(aadhar=('renamed.pdf', content, 'application/pdf')))

    assert response.status_code == 400
    assert response.json() == {'error': 'This Aadhar card image has already been uploaded'}
    assert len(notifier.sent) == 1


def test_aadhar_document_reused_as_college_id_is_rejected(register):
    content = b'%PDF-1.4 swapped slots'
    assert register(files=documents(aadhar=('a.pdf', content, 'application/pdf'))).status_code == 200

    response = register(files=documents(college_id=('b.pdf', content, 'application/pdf')))

    assert response.status_code == 400
    assert response.json() == {'error': 'This College ID image has already been uploaded'}


def test_same_document_in_both_slots_is_rejected(register):
    content = b'%PDF-1.4 one file twice'
    response = register(files=documents(
        aadhar=('a.pdf', content, 'application/pdf'),
        college_id=('b.pdf', content, 'application/pdf')
    ))

    assert response.status_code == 400
    assert 'different documents' in response.json()['error']


@pytest.mark.parametrize('field, value', [
    ('email', 'taken@gmail.com'),
    ('mobile', '9876543210'),
    ('aadhar', '123412341234'),
    ('registrationId', 'fixed-registration-id'),
])
def test_unique_fields_are_enforced(register, field, value):
    assert register(registration_form(**{field: value})).status_code == 200

    response = register(registration_form(**{field: value}))

    assert response.status_code == 400
    assert response.json() == {'error': f'{field} already exists'}


def test_rejected_registration_removes_stored_documents(register):
    assert register(registration_form(teamName='Keep')).status_code == 200
    before = stored_uploads()

    response = register(registration_form(teamName='Keep'))

    assert response.status_code == 400
    assert stored_uploads() == before


@pytest.mark.parametrize('team_size', ['1', '4'])
def test_team_size_bounds_accepted(register, team_size):
    response = register(registration_form(teamSize=team_size))
    assert response.status_code == 200
    assert response.json()['data']['teamSize'] == int(team_size)


@pytest.mark.parametrize('team_size', ['0', '5', 'two', '4.0', '2.5'])
def test_team_size_out_of_range_rejected(register, team_size):
    response = register(registration_form(teamSize=team_size))

    assert response.status_code == 400
    errors = response.json()['errors']
    assert errors == [{'msg': 'Team size must be between 1 and 4', 'param': 'teamSize', 'location': 'body'}]


@pytest.mark.parametrize('aadhar', ['12345678901', '1234567890123', '12345678901a'])
def test_aadhar_must_be_twelve_digits(register, aadhar):
    response = register(registration_form(aadhar=aadhar))

    assert response.status_code == 400
    assert response.json()['errors'][0]['msg'] == 'Aadhar must be 12 digits'


def test_validation_reports_every_bad_field(register):
    form = registration_form(email='not-an-email', mobile='5123456789', teamName='   ')
    del form['college']

    response = register(form)

    assert response.status_code == 400
    errors = {e['param']: e['msg'] for e in response.json()['errors']}
    assert errors == {
        'email': 'Invalid email format',
        'mobile': 'Invalid mobile number',
        'teamName': 'Team name is required',
        'college': 'College is required',
    }
    assert stored_uploads() == []


def test_missing_document_rejected(register):
    response = register(files=[('aadharImage', pdf_document('aadhar'))])

    assert response.status_code == 400
    assert response.json() == {'error': 'Both Aadhar card and College ID images are required'}


def test_two_files_in_one_slot_rejected(register):
    files = documents() + [('aadharImage', pdf_document('extra'))]

    response = register(files=files)

    assert response.status_code == 400
    assert response.json() == {'error': 'Only one file is allowed for aadharImage'}


def test_oversized_document_rejected(register, db_session):
    big = ('big.pdf', b'%PDF' + b'0' * 300_000, 'application/pdf')

    response = register(files=documents(college_id=big))

    assert response.status_code == 400
    assert response.json() == {'error': 'File size must be 300KB or less'}
    assert db_session.query(Registration).count() == 0


def test_document_at_size_limit_accepted(register):
    exact = ('exact.pdf', b'%' * 300_000, 'application/pdf')
    assert register(files=documents(aadhar=exact)).status_code == 200


@pytest.mark.parametrize('document', [
    ('card.gif', b'GIF89a', 'image/gif'),
    ('card.exe', b'MZ', 'application/pdf'),
    ('card.png', b'PNG', 'text/plain'),
])
def test_wrong_document_type_rejected(register, document):
    response = register(files=documents(aadhar=document))

    assert response.status_code == 400
    assert response.json() == {'error': 'Only images (jpeg, jpg, png) and PDFs are allowed'}


def test_email_failure_keeps_registration(client, register, notifier, db_session):
    notifier.fail = True
    form = registration_form()

    response = register(form)

    assert response.status_code == 200
    body = response.json()
    assert body['emailSent'] is False
    assert 'could not be sent' in body['message']
    assert db_session.query(Registration).filter_by(registration_id=form['registrationId']).count() == 1


def test_list_events(client):
    response = client.get('/api/events')

    assert response.status_code == 200
    values = [e['value'] for e in response.json()['data']]
    assert 'robo-race' in values


def test_storage_and_lookups_run_in_worker_thread(register, monkeypatch):
    on_event_loop = []

    def running_loop():
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return True

    def spy_hash(path):
        on_event_loop.append(running_loop())
        return hash_file(path)

    original_check = registration_service.DuplicateChecker.check

    def spy_check(self, *args):
        on_event_loop.append(running_loop())
        return original_check(self, *args)

    monkeypatch.setattr(registration_service, 'hash_file', spy_hash)
    monkeypatch.setattr(registration_service.DuplicateChecker, 'check', spy_check)

    response = register()

    assert response.status_code == 200
    assert on_event_loop == [False, False, False]
