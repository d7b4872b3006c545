"""
Small builders for the API test suites of all apps.

They create users with the right profile type and gigs with packages, so each
test module only spells out the data that matters to it.
"""
from decimal import Decimal

from django.contrib.auth.models import User

from gigs_app.models import Gig, GigPackage
from profile_app.models import Profile

DEFAULT_PACKAGES = (
    # package_type, price, delivery_time_in_days
    ('basic', Decimal('100.00'), 5),
    ('standard', Decimal('200.00'), 7),
    ('premium', Decimal('400.00'), 10),
)


def create_client_user(username='client', **kwargs):
    return User.objects.create_user(username=username, password='password123', **kwargs)


def create_freelancer_user(username='freelancer', **kwargs):
    user = User.objects.create_user(username=username, password='password123', **kwargs)
    user.profile.type = Profile.UserType.FREELANCER
    user.profile.save()
    user.refresh_from_db()
    return user


def create_admin_user(username='admin'):
    return User.objects.create_user(username=username, password='password123', is_staff=True)


def create_gig(freelancer_user, title='Logo design', status=Gig.GigStatus.ACTIVE, packages=DEFAULT_PACKAGES):
    gig = Gig.objects.create(
        freelancer=freelancer_user.freelancer_profile,
        title=title,
        description=f"{title} by {freelancer_user.username}",
        category='design',
        status=status,
    )
    for package_type, price, delivery_days in packages:
        GigPackage.objects.create(
            gig=gig,
            package_type=package_type,
            title=f"{package_type.title()} {title}",
            price=price,
            delivery_time_in_days=delivery_days,
            revisions=2,
            features=['Source files'],
        )
    return gig


def create_order(client_user, gig, package='basic', status=None, is_urgent=False):
    """
    Places an order through the order service and optionally moves it straight to
    `status` without going through the intermediate transitions.
    """
    from orders_app.models import Order
    from orders_app.services import create_order as place_order

    order = place_order(client_user, gig, package, requirements='Please use blue.', is_urgent=is_urgent)
    if status is not None:
        Order.objects.filter(pk=order.pk).update(status=status)
        order.refresh_from_db()
    return order
