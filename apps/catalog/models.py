from django.db import models


class Country(models.Model):
    """Country a cap design (or a trader) comes from."""

    name_full = models.CharField(max_length=100, unique=True)
    name_abb = models.CharField(max_length=10, blank=True)

    class Meta:
        db_table = 'caps_country'
        ordering = ['name_full']
        verbose_name_plural = 'countries'

    def __str__(self):
        return self.name_full


class BeerCap(models.Model):
    """A catalogued cap design (not a physical unit)."""

    beer_name = models.CharField(max_length=200)
    cap_no = models.PositiveIntegerField(default=1)
    sheet = models.CharField(max_length=50, null=True, blank=True)
    country = models.ForeignKey(
        Country,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='caps'
    )
    entry_date = models.DateField(null=True, blank=True)
    issued_year = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        db_table = 'beer_caps'
        indexes = [
            models.Index(fields=['country', 'beer_name'], name='beer_caps_country_name_idx'),
        ]
        ordering = ['beer_name', 'cap_no']

    def __str__(self):
        return f"{self.beer_name} #{self.cap_no}"
