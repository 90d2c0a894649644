from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from .models import Guide, Tourist

User = get_user_model()


class TouristSummarySerializer(serializers.ModelSerializer):
    profilePhoto = serializers.CharField(source="profile_photo", read_only=True)

    class Meta:
        model = Tourist
        fields = ["id", "name", "profilePhoto"]


class GuideSummarySerializer(serializers.ModelSerializer):
    profilePhoto = serializers.CharField(source="profile_photo", read_only=True)
    fee = serializers.SerializerMethodField()

    class Meta:
        model = Guide
        fields = ["id", "name", "profilePhoto", "fee"]

    def get_fee(self, obj: Guide) -> str:
        return f"{obj.fee_cents / 100:.2f}"


class UserSerializer(serializers.ModelSerializer):
    """Expose the public fields for the custom user model."""

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "first_name",
            "last_name",
            "display_name",
            "role",
        ]
        read_only_fields = fields


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Allow SimpleJWT to accept an email field for authentication."""

    username_field = User.USERNAME_FIELD

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["email"] = serializers.EmailField(required=False)
        self.fields[self.username_field].required = False

    def validate(self, attrs):
        """Proxy email through to SimpleJWT while returning user details."""
        email = attrs.get("email")
        if email and not attrs.get("username"):
            attrs["username"] = email.lower()
        attrs.pop("email", None)
        if not attrs.get("username"):
            raise serializers.ValidationError({"email": "This field is required."})
        data = super().validate(attrs)
        data["user"] = UserSerializer(self.user).data
        return data
