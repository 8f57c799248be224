from django.contrib import admin

from .models import Country, BeerCap


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ['name_full', 'name_abb']
    search_fields = ['name_full', 'name_abb']


@admin.register(BeerCap)
class BeerCapAdmin(admin.ModelAdmin):
    list_display = ['beer_name', 'cap_no', 'country', 'sheet', 'issued_year']
    list_filter = ['country']
    search_fields = ['beer_name']
    raw_id_fields = ['country']
