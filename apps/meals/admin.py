from django.contrib import admin
from .models import Meal, GuestMeal, MealSettings, AutoMealSettings


@admin.register(Meal)
class MealAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'date', 'type', 'period']
    list_filter = ['type', 'date']
    search_fields = ['user__email', 'group__name']
    raw_id_fields = ['user', 'group', 'period']
    date_hierarchy = 'date'


@admin.register(GuestMeal)
class GuestMealAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'date', 'type', 'count']
    list_filter = ['type', 'date']
    search_fields = ['user__email', 'group__name']
    raw_id_fields = ['user', 'group', 'period']


@admin.register(MealSettings)
class MealSettingsAdmin(admin.ModelAdmin):
    list_display = ['group', 'auto_meal_enabled', 'max_meals_per_day', 'allow_guest_meals', 'guest_meal_limit']
    list_filter = ['auto_meal_enabled', 'allow_guest_meals']
    raw_id_fields = ['group']


@admin.register(AutoMealSettings)
class AutoMealSettingsAdmin(admin.ModelAdmin):
    list_display = ['user', 'group', 'is_enabled', 'start_date', 'end_date']
    list_filter = ['is_enabled']
    search_fields = ['user__email']
    raw_id_fields = ['user', 'group']
