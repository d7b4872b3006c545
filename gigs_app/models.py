from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal

from profile_app.models import FreelancerProfile


class Gig(models.Model):
    """
    Represents a service listed by a freelancer.

    A gig holds the shared information of a service (title, description, category) and
    acts as a container for its pricing tiers, which are defined in the related
    `GigPackage` model. Orders can only be placed on ACTIVE gigs.

    Gigs are never deleted, because orders reference them; the API archives them instead.

    Attributes:
        freelancer (ForeignKey): The FreelancerProfile that offers this gig.
        title (CharField): The customer-facing title of the gig.
        description (TextField): A detailed description of the service.
        category (CharField): A free-form category used for browsing and filtering.
        status (CharField): DRAFT, ACTIVE, PAUSED or ARCHIVED.
        image (ImageField): An optional primary image.
        created_at (DateTimeField): Timestamp of when the gig was created.
        updated_at (DateTimeField): Timestamp of the last update.
    """
    class GigStatus(models.TextChoices):
        DRAFT = 'DRAFT', 'Draft'
        ACTIVE = 'ACTIVE', 'Active'
        PAUSED = 'PAUSED', 'Paused'
        ARCHIVED = 'ARCHIVED', 'Archived'

    # PROTECT: a freelancer with gigs cannot be removed while orders may still point here.
    freelancer = models.ForeignKey(
        FreelancerProfile,
        on_delete=models.PROTECT,
        related_name="gigs")

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=GigStatus.choices,
        default=GigStatus.ACTIVE
    )
    image = models.ImageField(
        upload_to='gigs/images/',
        blank=True,
        null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # Default ordering for querysets: most recently updated gigs first.
        ordering = ['-updated_at']
        verbose_name = "Gig"
        verbose_name_plural = "Gigs"

    def __str__(self):
        return self.title

    @property
    def is_orderable(self):
        return self.status == self.GigStatus.ACTIVE


class GigPackage(models.Model):
    """
    A priced tier of a Gig (basic, standard or premium).

    Each package defines its own price, delivery time, revisions and features. A gig
    has at most one package of each type; the pricing resolver looks packages up by
    this type when an order is placed.

    Attributes:
        gig (ForeignKey): The parent Gig this package belongs to.
        package_type (CharField): 'basic', 'standard' or 'premium'.
        title (CharField): The title of this package, copied onto orders.
        price (DecimalField): The base price, strictly positive.
        delivery_time_in_days (PositiveIntegerField): Delivery time in whole days.
        revisions (PositiveIntegerField): The number of revision rounds included.
        features (JSONField): A list of features included in the package.
        description (TextField): A specific description for this package.
    """
    class PackageType(models.TextChoices):
        BASIC = 'basic', 'Basic'
        STANDARD = 'standard', 'Standard'
        PREMIUM = 'premium', 'Premium'

    # `related_name="packages"` gives `gig.packages.all()`.
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name="packages")

    package_type = models.CharField(
        max_length=20,
        choices=PackageType.choices,
        default=PackageType.BASIC
    )
    title = models.CharField(max_length=150)

    # DecimalField avoids floating-point inaccuracies with currency.
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    delivery_time_in_days = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    revisions = models.PositiveIntegerField(default=0)
    features = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['price']
        verbose_name = "Gig Package"
        verbose_name_plural = "Gig Packages"
        constraints = [
            models.UniqueConstraint(fields=['gig', 'package_type'], name='unique_package_type_per_gig'),
        ]

    def __str__(self):
        return f"{self.gig.title} - {self.title} (${self.price})"
