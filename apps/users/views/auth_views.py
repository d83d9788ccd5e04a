"""
User registration view.
"""
import logging

from rest_framework.views import APIView
from rest_framework.permissions import AllowAny
from rest_framework_simplejwt.tokens import RefreshToken

from apps.common.exceptions import ServiceError
from apps.common.utils import success_response, error_response
from apps.referrals.services import ReferralService
from ..serializers import UserDetailSerializer, UserRegistrationSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    """User registration endpoint; an optional referral code links the new customer to a referrer"""
    permission_classes = [AllowAny]

    def post(self, request):
        serializer = UserRegistrationSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response('Registration failed', serializer.errors)

        referral_code = (serializer.validated_data.get('referral_code') or '').strip()
        user = serializer.save()

        # A bad referral code never blocks registration
        referral_created = False
        if referral_code:
            try:
                ReferralService().create_referral(user, referral_code)
                referral_created = True
            except ServiceError as exc:
                logger.info(f"Referral not created for new customer {user.id}: {exc.message}")

        user.refresh_from_db()
        refresh = RefreshToken.for_user(user)
        return success_response({
            'token': str(refresh.access_token),
            'refresh': str(refresh),
            'user': UserDetailSerializer(user, context={'request': request}).data,
            'referralCreated': referral_created,
        }, 'Registration successful')
