from unittest import mock


def fake_response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


def fake_session(*responses):
    """A stand-in ``requests.Session`` answering ``request`` calls in order."""
    session = mock.Mock()
    session.request.side_effect = list(responses)
    return session
