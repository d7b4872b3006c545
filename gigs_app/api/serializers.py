from decimal import Decimal

from rest_framework import serializers
from django.contrib.auth.models import User
from django.db import transaction
from ..models import Gig, GigPackage


class UserDetailSerializer(serializers.ModelSerializer):
    """
    A minimal set of User fields to show who offers a gig, without exposing sensitive
    account data.
    """
    class Meta:
        model = User
        fields = ['first_name', 'last_name', 'username']


class GigPackageReadSerializer(serializers.ModelSerializer):
    """
    Read-only representation of a single package, used for `GET /api/gig-packages/{id}/`
    and nested inside the gig detail response.
    """

    class Meta:
        model = GigPackage
        fields = [
            'id',
            'package_type',
            'title',
            'price',
            'delivery_time_in_days',
            'revisions',
            'features',
            'description',
        ]


class GigPackageWriteSerializer(serializers.ModelSerializer):
    """
    Writable fields of a package, used for nested writes in `GigCreateUpdateSerializer`.
    """
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    delivery_time_in_days = serializers.IntegerField(min_value=1)
    revisions = serializers.IntegerField(min_value=0, required=False, default=0)
    features = serializers.ListField(
        child=serializers.CharField(max_length=255), required=False, default=list
    )

    class Meta:
        model = GigPackage
        fields = [
            'package_type',
            'title',
            'price',
            'delivery_time_in_days',
            'revisions',
            'features',
            'description',
        ]


class GigPackageUrlSerializer(serializers.HyperlinkedModelSerializer):
    """
    A lightweight package reference (id, type and URL) for the gig list, which keeps the
    list payload small.
    """
    # The view_name must match the basename given to the router for GigPackageViewSet.
    url = serializers.HyperlinkedIdentityField(view_name='gigpackage-detail')

    class Meta:
        model = GigPackage
        fields = ['id', 'package_type', 'url']


class GigListSerializer(serializers.ModelSerializer):
    """
    Summary of a gig for `GET /api/gigs/`, including the annotated cheapest price and
    fastest delivery time.
    """
    # These expect the queryset to be annotated by the view.
    min_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    min_delivery_time = serializers.IntegerField(read_only=True, source='min_delivery_time_days')

    user_details = UserDetailSerializer(source='freelancer.user', read_only=True)
    packages = GigPackageUrlSerializer(many=True, read_only=True)

    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = Gig
        fields = [
            'id',
            'freelancer',
            'title',
            'image',
            'description',
            'category',
            'status',
            'created_at',
            'updated_at',
            'packages',
            'min_price',
            'min_delivery_time',
            'user_details',
        ]


class GigDetailSerializer(serializers.ModelSerializer):
    """
    Complete representation of a gig with fully nested packages. Used for `retrieve` and
    as the response of `create` and `update`.
    """
    packages = GigPackageReadSerializer(many=True, read_only=True)
    user_details = UserDetailSerializer(source='freelancer.user', read_only=True)
    freelancer_rating = serializers.DecimalField(
        source='freelancer.rating', max_digits=3, decimal_places=2, read_only=True
    )
    created_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)
    updated_at = serializers.DateTimeField(format="%Y-%m-%dT%H:%M:%SZ", read_only=True)

    class Meta:
        model = Gig
        fields = [
            'id',
            'freelancer',
            'title',
            'image',
            'description',
            'category',
            'status',
            'created_at',
            'updated_at',
            'packages',
            'user_details',
            'freelancer_rating',
        ]


class GigCreateUpdateSerializer(serializers.ModelSerializer):
    """
    Creates a gig together with its packages, or updates a gig and its packages.

    Packages are identified by their `package_type`: on update, a known type updates the
    existing package and an unknown type adds a new one. A gig can be set to DRAFT,
    ACTIVE or PAUSED here; archiving happens through DELETE.
    """
    packages = GigPackageWriteSerializer(many=True)
    status = serializers.ChoiceField(
        choices=[
            Gig.GigStatus.DRAFT,
            Gig.GigStatus.ACTIVE,
            Gig.GigStatus.PAUSED,
        ],
        required=False
    )

    class Meta:
        model = Gig
        fields = ['title', 'description', 'category', 'status', 'image', 'packages']

    def validate_packages(self, value):
        """
        A new gig needs at least one package, and no package type may appear twice in a
        single request.
        """
        if self.instance is None and not value:
            raise serializers.ValidationError("A gig needs at least one package.")

        # On PATCH the nested packages are partial, but the type is still needed to match them.
        if any('package_type' not in package for package in value):
            raise serializers.ValidationError("Each package must have a 'package_type'.")

        package_types = [package['package_type'] for package in value]
        if len(package_types) != len(set(package_types)):
            raise serializers.ValidationError("Each package type may only be given once.")

        return value

    def create(self, validated_data):
        """
        Creates the Gig and its GigPackages atomically, so that no gig is left without
        packages if one of them fails to save.
        """
        packages_data = validated_data.pop('packages')

        with transaction.atomic():
            gig = Gig.objects.create(**validated_data)
            for package_item in packages_data:
                GigPackage.objects.create(gig=gig, **package_item)

        return gig

    def update(self, instance, validated_data):
        packages_data = validated_data.pop('packages', None)

        with transaction.atomic():
            for field, value in validated_data.items():
                setattr(instance, field, value)
            instance.save()

            if packages_data:
                existing_packages = {package.package_type: package for package in instance.packages.all()}

                for package_data in packages_data:
                    package_instance = existing_packages.get(package_data['package_type'])
                    if package_instance is None:
                        missing = {'title', 'price', 'delivery_time_in_days'} - set(package_data)
                        if missing:
                            raise serializers.ValidationError({
                                'packages': f"A new '{package_data['package_type']}' package needs: "
                                            f"{', '.join(sorted(missing))}."
                            })
                        GigPackage.objects.create(gig=instance, **package_data)
                        continue

                    for field, value in package_data.items():
                        setattr(package_instance, field, value)
                    package_instance.save()

        return instance
