"""
User serializers for profile and registration.
"""
from rest_framework import serializers
from django.contrib.auth.hashers import make_password
from ..models import User


class UserDetailSerializer(serializers.ModelSerializer):
    """
    Serializer for the customer's own profile.
    Used for: GET /api/users/me/
    Wallet and referral fields are read-only; they change only through the ledger services.
    """
    referred_by_code = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'email', 'phone', 'first_name', 'last_name',
            'wallet_balance', 'welcome_bonus_credited', 'referral_code',
            'referred_by_code', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'wallet_balance', 'welcome_bonus_credited', 'referral_code',
            'created_at', 'updated_at'
        ]

    def get_referred_by_code(self, obj):
        if obj.referred_by_id:
            return obj.referred_by.referral_code
        return None


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for user registration (create operation).
    Used for: POST /api/users/register/
    """
    password = serializers.CharField(write_only=True, min_length=6)
    confirm_password = serializers.CharField(write_only=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=20)
    email = serializers.EmailField()
    referral_code = serializers.CharField(
        required=False,
        allow_blank=True,
        write_only=True,
        help_text="Optional referral code of the customer who invited this user"
    )

    class Meta:
        model = User
        fields = [
            'username', 'email', 'phone', 'password', 'confirm_password',
            'first_name', 'last_name', 'referral_code'
        ]

    def validate(self, attrs):
        """Object-level validation: check password confirmation"""
        if attrs.get('password') != attrs.get('confirm_password'):
            raise serializers.ValidationError({
                'confirm_password': "Passwords don't match"
            })
        return attrs

    def validate_phone(self, value):
        if value and User.objects.filter(phone=value).exists():
            raise serializers.ValidationError("Phone number already registered")
        return value or None

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already registered")
        return value

    def create(self, validated_data):
        """Create user with hashed password"""
        validated_data.pop('confirm_password')
        validated_data.pop('referral_code', None)
        validated_data['password'] = make_password(validated_data['password'])
        return User.objects.create(**validated_data)


class UserUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for profile updates.
    Used for: PATCH /api/users/me/
    """

    class Meta:
        model = User
        fields = ['email', 'phone', 'first_name', 'last_name']

    def validate_phone(self, value):
        if value and User.objects.filter(phone=value).exclude(pk=self.instance.pk).exists():
            raise serializers.ValidationError("Phone number already registered")
        return value or None
