from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import CustomUser, UserSession, Account, Verification


class CustomUserAdmin(UserAdmin):
    model = CustomUser

    list_display = ('email', 'name', 'email_verified', 'is_staff', 'is_active')
    list_filter = ('email_verified', 'is_staff', 'is_active')
    search_fields = ('email', 'name')

    readonly_fields = ('uuid', 'last_login', 'created_at', 'updated_at')

    fieldsets = (
        (None, {'fields': ('uuid', 'email', 'password')}),

        ('Personal Info', {
            'fields': ('name', 'image')
        }),

        ('Permissions', {
            'fields': ('email_verified', 'is_active', 'is_staff', 'is_superuser')
        }),

        ('Important Dates', {
            'fields': ('last_login', 'created_at', 'updated_at')
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'password1', 'password2', 'is_staff', 'is_superuser'),
        }),
    )

    ordering = ('email',)


@admin.register(UserSession)
class UserSessionAdmin(admin.ModelAdmin):
    list_display = ('user', 'ip_address', 'expires_at', 'created_at')
    search_fields = ('user__email', 'ip_address')
    readonly_fields = ('token', 'created_at', 'updated_at')


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ('user', 'provider_id', 'account_id', 'created_at')
    list_filter = ('provider_id',)
    search_fields = ('user__email', 'account_id')


@admin.register(Verification)
class VerificationAdmin(admin.ModelAdmin):
    list_display = ('identifier', 'expires_at', 'created_at')
    search_fields = ('identifier',)


admin.site.register(CustomUser, CustomUserAdmin)
