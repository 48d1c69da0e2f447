from django.core.exceptions import ObjectDoesNotExist
from django.test import SimpleTestCase

from assignments import errors
from assignments.views.responses import service_error_response


class ServiceErrorResponseTest(SimpleTestCase):

    def test_codes_map_to_http_status(self):
        cases = [
            (errors.ValidationError('bad'), 400),
            (errors.TeamAlreadyExists(), 400),
            (errors.NotFound("PR 'x' not found"), 404),
            (errors.PullRequestAlreadyExists(), 409),
            (errors.AlreadyMerged(), 409),
            (errors.ReviewerNotAssigned(), 409),
            (errors.NoReviewerCandidates(), 409),
        ]
        for exc, http_status in cases:
            with self.subTest(code=exc.code):
                response = service_error_response(exc)
                self.assertEqual(response.status_code, http_status)
                self.assertEqual(response.data, {'error': {'code': exc.code, 'message': exc.message}})

    def test_internal_errors_are_hidden(self):
        response = service_error_response(errors.InvalidTransition('MERGED', 'OPEN', 'pr-1'))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['error'], {'code': 'INTERNAL_ERROR', 'message': 'Internal server error'})

    def test_not_found_is_service_error_only(self):
        """NotFound ловится только как ServiceError"""
        exc = errors.NotFound()

        self.assertIsInstance(exc, errors.ServiceError)
        self.assertNotIsInstance(exc, ObjectDoesNotExist)
        self.assertEqual(exc.message, 'resource not found')
