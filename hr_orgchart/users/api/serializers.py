from rest_framework import serializers

from hr_orgchart.users.models import User


class UserSerializer(serializers.ModelSerializer[User]):
    full_name = serializers.CharField(source="name", read_only=True)
    groups = serializers.SlugRelatedField(
        many=True,
        read_only=True,
        slug_field="name",
    )
    id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "groups",
        ]

    def update(self, instance, validated_data):
        if "username" in self.initial_data:
            raise serializers.ValidationError(
                {"username": "This field is read-only; it owns chart profiles."}
            )
        return super().update(instance, validated_data)
