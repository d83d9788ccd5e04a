"""
Service exceptions and the DRF handler that renders them in the API's
{code, msg, errors} format.
"""
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
import logging

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Request could not be processed'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Bad input; nothing was created or mutated"""
    default_message = 'Validation error'


class InvalidCode(ValidationError):
    default_message = 'Invalid referral code'


class SelfReferral(ValidationError):
    default_message = 'Cannot refer yourself'


class AlreadyReferred(ValidationError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'User has already been referred'


class InvalidState(ServiceError):
    """The entity is not in a state that allows the operation"""
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Operation not allowed in current state'


class OrderNotDelivered(InvalidState):
    default_message = 'Order must be delivered first'


class AlreadyCredited(InvalidState):
    default_message = 'Already credited'


class InsufficientFunds(ServiceError):
    default_message = 'Insufficient wallet balance'


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Resource not found'


class SideEffectFailure(Exception):
    """
    A best-effort step that failed after the primary write succeeded.
    Collected into a report and persisted; never raised to the caller.
    """

    def __init__(self, step, error, order_id=None):
        self.step = step
        self.error = error
        self.order_id = order_id
        super().__init__(f"{step} failed for order {order_id}: {error}")

    def as_dict(self):
        return {'step': self.step, 'order_id': self.order_id, 'error': str(self.error)}


def custom_exception_handler(exc, context):
    """
    Custom exception handler that returns consistent error responses
    """
    if isinstance(exc, ServiceError):
        logger.info(f"Service error {exc.__class__.__name__}: {exc.message}")
        return Response({
            'code': exc.status_code,
            'msg': exc.message,
            'errors': {'type': exc.__class__.__name__, **exc.details},
        }, status=exc.status_code)

    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        logger.error(f"API Exception: {exc}", exc_info=True)

        custom_response_data = {
            'code': response.status_code,
            'msg': 'An error occurred',
            'errors': response.data
        }

        if response.status_code == status.HTTP_400_BAD_REQUEST:
            custom_response_data['msg'] = 'Validation error'
        elif response.status_code == status.HTTP_401_UNAUTHORIZED:
            custom_response_data['msg'] = 'Authentication required'
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            custom_response_data['msg'] = 'Permission denied'
        elif response.status_code == status.HTTP_404_NOT_FOUND:
            custom_response_data['msg'] = 'Resource not found'
        elif response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            custom_response_data['msg'] = 'Method not allowed'
        elif response.status_code >= 500:
            custom_response_data['msg'] = 'Internal server error'
            # Don't expose internal errors in production
            if not hasattr(context['request'], 'user') or not context['request'].user.is_staff:
                custom_response_data['errors'] = {'detail': 'Internal server error'}

        response.data = custom_response_data

    return response
