"""
Management command to create sample data for trying out the back office.

Usage:
    python manage.py create_sample_data

This creates:
- 4 users (admin, two partners, one merchant portal user)
- 1 organization with 2 teams
- Warehouse categories, item types, devices and services with addons
- Merchants
- Contracts in several statuses, with filled wizard sections
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.accounts.models import User, UserRole
from apps.catalog.models import Category, CategoryItemFilter, ItemKind, ItemType, ProductAddon, WarehouseItem
from apps.contracts.models import Contract, ContractSource, ContractStatus, KanbanColumn, LostReason
from apps.contracts.services import change_status, create_contract, save_onboarding_draft
from apps.merchants.models import Merchant
from apps.notifications.models import Notification
from apps.organizations.models import Organization, Team


class Command(BaseCommand):
    help = 'Create sample data for trying out the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        users = self.create_users()
        self.create_organizations(users)
        items = self.create_catalog(users['admin'])
        merchants = self.create_merchants(users['admin'])
        self.create_contracts(users, items, merchants)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts:')
        self.stdout.write('  admin@example.com / admin123 (admin)')
        self.stdout.write('  petra@example.com / password123 (partner)')
        self.stdout.write('  tomas@example.com / password123 (partner)')
        self.stdout.write('  portal@example.com / password123 (merchant)')

    def clear_data(self):
        """Clear all sample data from the database."""
        Notification.objects.all().delete()
        KanbanColumn.objects.all().delete()
        Contract.objects.all().delete()
        Merchant.objects.all().delete()
        ProductAddon.objects.all().delete()
        WarehouseItem.objects.all().delete()
        ItemType.objects.all().delete()
        Category.objects.all().delete()
        Team.objects.all().delete()
        Organization.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        User.objects.filter(email='admin@example.com').delete()

    def _user(self, email, password, **defaults):
        user, _ = User.objects.get_or_create(email=email, defaults=defaults)
        user.set_password(password)
        user.save()
        return user

    def create_users(self):
        """Create test users."""
        self.stdout.write('  Creating users...')

        admin = self._user(
            'admin@example.com', 'admin123',
            first_name='Adam', last_name='Admin',
            role=UserRole.ADMIN, is_staff=True, is_superuser=True, email_verified=True,
        )
        petra = self._user(
            'petra@example.com', 'password123',
            first_name='Petra', last_name='Svobodová',
            role=UserRole.PARTNER, email_verified=True,
        )
        tomas = self._user(
            'tomas@example.com', 'password123',
            first_name='Tomáš', last_name='Dvořák',
            role=UserRole.PARTNER, email_verified=True,
        )
        portal = self._user(
            'portal@example.com', 'password123',
            first_name='Jana', last_name='Nováková',
            role=UserRole.MERCHANT, email_verified=True,
        )

        return {
            'admin': admin,
            'petra': petra,
            'tomas': tomas,
            'portal': portal,
        }

    def create_organizations(self, users):
        """Create an organization with two sales teams."""
        self.stdout.write('  Creating organizations and teams...')

        organization, _ = Organization.objects.get_or_create(
            name='Acme Sales',
            defaults={
                'description': 'Field and telesales partners',
                'created_by': users['admin'],
            }
        )

        for name, member in (('Prague', users['petra']), ('Brno', users['tomas'])):
            team, _ = Team.objects.get_or_create(
                organization=organization,
                name=name,
                defaults={'team_leader': member, 'created_by': users['admin']},
            )
            member.team = team
            member.organization = organization
            member.save(update_fields=['team', 'organization'])

    def create_catalog(self, created_by):
        """Create warehouse categories, item types, items and addons."""
        self.stdout.write('  Creating warehouse items...')

        terminals, _ = Category.objects.get_or_create(
            name='Payment terminals',
            defaults={'item_type_filter': CategoryItemFilter.DEVICE, 'position': 0},
        )
        services, _ = Category.objects.get_or_create(
            name='Services',
            defaults={'item_type_filter': CategoryItemFilter.SERVICE, 'position': 1},
        )
        portable, _ = ItemType.objects.get_or_create(name='Portable')

        items_data = [
            {
                'name': 'PAX A920',
                'kind': ItemKind.DEVICE,
                'category': terminals,
                'item_type': portable,
                'monthly_fee': Decimal('29.00'),
                'company_cost': Decimal('12.50'),
                'current_stock': 25,
                'min_stock': 5,
            },
            {
                'name': 'Terminal stand',
                'kind': ItemKind.DEVICE,
                'category': terminals,
                'monthly_fee': Decimal('2.00'),
                'company_cost': Decimal('0.50'),
                'current_stock': 3,
                'min_stock': 5,
            },
            {
                'name': 'Online payment gateway',
                'kind': ItemKind.SERVICE,
                'category': services,
                'monthly_fee': Decimal('15.00'),
                'company_cost': Decimal('4.00'),
            },
        ]

        items = {}
        for data in items_data:
            name = data.pop('name')
            item, _ = WarehouseItem.objects.get_or_create(
                name=name,
                defaults=dict(data, created_by=created_by),
            )
            items[name] = item

        ProductAddon.objects.get_or_create(
            parent_product=items['PAX A920'],
            addon_product=items['Terminal stand'],
            defaults={'is_default_selected': True},
        )
        return items

    def create_merchants(self, created_by):
        """Create merchants, one of them with a portal account."""
        self.stdout.write('  Creating merchants...')

        merchants_data = [
            ('Kavárna Na Rohu s.r.o.', '12345678', 'jana@narohu.cz', 'Praha'),
            ('Pekárna U Mostu a.s.', '87654321', 'info@umostu.cz', 'Brno'),
        ]

        merchants = []
        for company_name, ico, email, city in merchants_data:
            merchant, _ = Merchant.objects.get_or_create(
                company_name=company_name,
                ico=ico,
                defaults={
                    'contact_person_email': email,
                    'address_city': city,
                    'created_by': created_by,
                },
            )
            merchants.append(merchant)
        return merchants

    def _wizard_data(self, merchant, items, turnover):
        terminal = items['PAX A920']
        stand = items['Terminal stand']
        return {
            'current_step': 4,
            'visited_steps': [0, 1, 2, 3, 4],
            'contact_info': {
                'first_name': 'Jana',
                'last_name': 'Nováková',
                'email': merchant.contact_person_email,
                'phone': '777123456',
            },
            'company_info': {
                'company_name': merchant.company_name,
                'ico': merchant.ico,
                'address_city': merchant.address_city,
            },
            'business_locations': [
                {'location_id': 'loc-1', 'name': 'Main branch', 'estimated_turnover': turnover},
            ],
            'device_selection': [
                {
                    'item_id': 'item-1',
                    'warehouse_item_id': terminal.id,
                    'name': terminal.name,
                    'count': 2,
                    'monthly_fee': terminal.monthly_fee,
                    'company_cost': terminal.company_cost,
                    'addons': [
                        {
                            'addon_id': 'addon-1',
                            'addon_name': stand.name,
                            'monthly_fee': stand.monthly_fee,
                            'company_cost': stand.company_cost,
                            'is_per_device': True,
                        },
                    ],
                },
            ],
            'fees': {'regulated_rate': Decimal('1.5'), 'unregulated_rate': Decimal('2.0')},
        }

    def create_contracts(self, users, items, merchants):
        """Create contracts in several pipeline stages."""
        self.stdout.write('  Creating contracts...')

        if Contract.objects.exists():
            self.stdout.write('    Contracts already exist, skipping')
            return

        plan = [
            (users['petra'], merchants[0], ContractSource.TELESALES, ContractStatus.SIGNED, Decimal('120000')),
            (users['petra'], merchants[1], ContractSource.WEB, ContractStatus.SUBMITTED, Decimal('60000')),
            (users['tomas'], merchants[1], ContractSource.REFERRAL, ContractStatus.LOST, Decimal('30000')),
            (users['tomas'], None, ContractSource.FACEBOOK, ContractStatus.DRAFT, None),
        ]

        for partner, merchant, source, target_status, turnover in plan:
            contract = create_contract(created_by=partner, source=source)
            if merchant is not None:
                contract, _ = save_onboarding_draft(
                    contract=contract,
                    data=self._wizard_data(merchant, items, turnover),
                    user=partner,
                )
            if target_status == ContractStatus.LOST:
                change_status(
                    contract=contract,
                    new_status=target_status,
                    user=users['admin'],
                    lost_reason=LostReason.PRICE_TOO_HIGH,
                )
            elif target_status != ContractStatus.DRAFT:
                change_status(contract=contract, new_status=target_status, user=users['admin'])

        merchants[0].user = users['portal']
        merchants[0].save(update_fields=['user', 'updated_at'])
