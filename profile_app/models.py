from django.db import models
from django.contrib.auth.models import User
from django.core.validators import MinValueValidator


# --- Helper Functions ---
def user_directory_path(instance, filename):
    """
    Generates a dynamic, user-specific path for profile picture uploads.

    Each user's files are stored in a directory named after their user ID, which prevents
    filename clashes and keeps the media folder organized.

    Args:
        instance (Profile): The instance of the Profile model being saved.
        filename (str): The original filename of the uploaded file.

    Returns:
        str: A path like 'profiles/1/avatar.jpg'.
    """
    return f'profiles/{instance.user.id}/{filename}'


# --- Models ---
class Profile(models.Model):
    """
    Extends the built-in Django User model with the marketplace role and contact details.

    Every user has exactly one Profile, created automatically by a `post_save` signal on
    the User model (see `profile_app.signals`). The `type` field decides whether the user
    acts as a client (who buys services) or a freelancer (who sells them). Administrators
    are not a profile type; they are users with `is_staff=True`.
    """
    # on_delete=models.CASCADE: If a User is deleted, their associated Profile is also deleted.
    # related_name='profile': Allows easy reverse access from a User instance (`user.profile`).
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')

    class UserType(models.TextChoices):
        """The role of a user within the marketplace."""
        CLIENT = 'client', 'Client'
        FREELANCER = 'freelancer', 'Freelancer'

    # --- Profile-specific Fields ---
    file = models.ImageField(upload_to=user_directory_path, null=True,
                             blank=True, verbose_name="Profile picture")

    # The pattern `blank=True, default=''` stores an empty string instead of NULL.
    location = models.CharField(max_length=100, blank=True, default='', verbose_name="Location")
    tel = models.CharField(max_length=20, blank=True, default='', verbose_name="Phone number")
    description = models.TextField(blank=True, default='', verbose_name="Description")
    working_hours = models.CharField(max_length=50, blank=True,
                                     default='', verbose_name="Working hours")

    type = models.CharField(max_length=10, choices=UserType.choices,
                            default=UserType.CLIENT, verbose_name="User type")

    created_at = models.DateTimeField(auto_now_add=True)

    # --- Methods ---
    def __str__(self):
        return f"Profile of {self.user.username}"

    @property
    def file_url(self):
        """
        Returns the URL of the profile picture, or None when no file was uploaded.
        """
        if self.file and hasattr(self.file, 'url'):
            return self.file.url
        return None


class FreelancerProfile(models.Model):
    """
    The selling side of a freelancer account.

    Gigs and orders reference this model rather than the User directly, so that the
    freelancer's aggregated `rating` and `review_count` live next to the data they
    describe. Both aggregates are maintained exclusively by
    `reviews_app.services.recompute_freelancer_rating`.

    Attributes:
        user (OneToOneField): The freelancer's user account.
        headline (CharField): A short professional title, e.g. "Senior Django developer".
        skills (JSONField): A list of skill names.
        hourly_rate (DecimalField): Optional indicative hourly rate.
        rating (DecimalField): Average of all review ratings, 0 when there are none.
        review_count (PositiveIntegerField): Number of reviews the average is based on.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='freelancer_profile'
    )
    headline = models.CharField(max_length=255, blank=True, default='')
    skills = models.JSONField(default=list, blank=True)
    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )

    # --- Aggregates, written only by the rating recomputation ---
    rating = models.DecimalField(max_digits=3, decimal_places=2, default=0)
    review_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Freelancer profile"
        verbose_name_plural = "Freelancer profiles"

    def __str__(self):
        return f"Freelancer {self.user.username}"
