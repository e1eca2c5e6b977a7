"""
Test suite for the Catalog module
Tests: sweet CRUD, search filters, purchase/restock stock rules and role checks
"""
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from decimal import Decimal
from datetime import timedelta
from backend.catalog import services
from backend.catalog.models import MAX_QUANTITY, Sweet
from backend.catalog.repositories import SweetRepository
from backend.catalog.exceptions import SweetNotFound, OutOfStock, InsufficientQuantity, StockLimitExceeded
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient, FAST_PASSWORD_HASHERS


class InMemorySweetRepository:
    """Sweet store fake mirroring SweetRepository without a database"""

    def __init__(self):
        self.sweets = {}
        self.next_id = 1
        self.clock = timezone.now()

    def list(self, filters=None):
        filters = filters or {}
        result = list(self.sweets.values())
        if filters.get('name'):
            result = [s for s in result if filters['name'].lower() in s.name.lower()]
        if filters.get('category'):
            result = [s for s in result if filters['category'].lower() in s.category.lower()]
        if filters.get('min_price') is not None:
            result = [s for s in result if s.price >= filters['min_price']]
        if filters.get('max_price') is not None:
            result = [s for s in result if s.price <= filters['max_price']]
        return sorted(result, key=lambda s: (s.created_at, s.id), reverse=True)

    def get(self, pk):
        return self.sweets.get(pk)

    def create(self, **fields):
        self.clock += timedelta(seconds=1)
        sweet = Sweet(id=self.next_id, created_at=self.clock, updated_at=self.clock, **fields)
        self.sweets[sweet.id] = sweet
        self.next_id += 1
        return sweet

    def update(self, sweet, fields):
        for attr, value in fields.items():
            setattr(sweet, attr, value)
        return sweet

    def delete(self, sweet):
        del self.sweets[sweet.id]

    def decrement_quantity(self, pk, amount):
        sweet = self.sweets.get(pk)
        if sweet is None or sweet.quantity < amount:
            return False
        sweet.quantity -= amount
        return True

    def increment_quantity(self, pk, amount):
        sweet = self.sweets.get(pk)
        if sweet is None or sweet.quantity + amount > MAX_QUANTITY:
            return False
        sweet.quantity += amount
        return True


class ContendedSweetRepository(InMemorySweetRepository):
    """Loses the first ``conflicts`` conditional decrements to another writer"""

    def __init__(self, conflicts, stolen=0):
        super().__init__()
        self.conflicts = conflicts
        self.stolen = stolen
        self.decrement_calls = 0

    def decrement_quantity(self, pk, amount):
        self.decrement_calls += 1
        if self.conflicts:
            self.conflicts -= 1
            self.sweets[pk].quantity -= self.stolen
            return False
        return super().decrement_quantity(pk, amount)


class CrowdedSweetRepository(InMemorySweetRepository):
    """Another writer fills the stock up to MAX_QUANTITY just before each increment"""

    def increment_quantity(self, pk, amount):
        self.sweets[pk].quantity = MAX_QUANTITY
        return super().increment_quantity(pk, amount)


class SweetServiceTests(SimpleTestCase):
    """Catalog services against an in-memory store"""

    def setUp(self):
        self.repository = InMemorySweetRepository()
        self.gulab = services.create(
            {'name': 'Gulab Jamun', 'category': 'Indian', 'price': Decimal('50.00'), 'quantity': 100},
            repository=self.repository
        )

    def test_find_one_missing(self):
        """Test looking up a missing sweet"""
        with self.assertRaises(SweetNotFound) as ctx:
            services.find_one(999, repository=self.repository)
        self.assertEqual(str(ctx.exception.detail), 'Sweet with ID 999 not found')

    def test_purchase_and_restock_scenario(self):
        """Test purchase then restock then an oversized purchase"""
        sweet = services.purchase(self.gulab.id, 5, repository=self.repository)
        self.assertEqual(sweet.quantity, 95)
        sweet = services.restock(self.gulab.id, 50, repository=self.repository)
        self.assertEqual(sweet.quantity, 145)
        with self.assertRaises(InsufficientQuantity):
            services.purchase(self.gulab.id, 200, repository=self.repository)
        self.assertEqual(services.find_one(self.gulab.id, repository=self.repository).quantity, 145)

    def test_purchase_exact_remaining_quantity(self):
        """Test buying exactly the remaining stock"""
        sweet = services.purchase(self.gulab.id, 100, repository=self.repository)
        self.assertEqual(sweet.quantity, 0)

    def test_purchase_out_of_stock_regardless_of_amount(self):
        """Test any purchase of an empty sweet is out of stock"""
        services.purchase(self.gulab.id, 100, repository=self.repository)
        for amount in (1, 5, 1000):
            with self.assertRaises(OutOfStock):
                services.purchase(self.gulab.id, amount, repository=self.repository)

    def test_insufficient_quantity_message(self):
        """Test insufficient quantity reports available and requested"""
        with self.assertRaises(InsufficientQuantity) as ctx:
            services.purchase(self.gulab.id, 101, repository=self.repository)
        self.assertEqual(str(ctx.exception.detail), 'Insufficient quantity. Available: 100, Requested: 101')
        self.assertEqual(self.gulab.quantity, 100)

    def test_purchase_missing_sweet(self):
        """Test purchasing a missing sweet"""
        with self.assertRaises(SweetNotFound):
            services.purchase(999, 1, repository=self.repository)

    def test_restock_missing_sweet(self):
        """Test restocking a missing sweet"""
        with self.assertRaises(SweetNotFound):
            services.restock(999, 1, repository=self.repository)

    def test_restock_up_to_stock_limit(self):
        """Test restocking may fill but never exceed the quantity column"""
        sweet = services.restock(self.gulab.id, MAX_QUANTITY - 100, repository=self.repository)
        self.assertEqual(sweet.quantity, MAX_QUANTITY)
        with self.assertRaises(StockLimitExceeded) as ctx:
            services.restock(self.gulab.id, 1, repository=self.repository)
        self.assertEqual(ctx.exception.available, MAX_QUANTITY)
        self.assertEqual(ctx.exception.requested, 1)
        self.assertEqual(self.gulab.quantity, MAX_QUANTITY)

    def test_restock_rechecks_limit_after_lost_race(self):
        """Test a concurrent restock that fills the stock turns into a limit error"""
        repository = CrowdedSweetRepository()
        sweet = services.create({'name': 'Jalebi', 'category': 'Indian', 'price': Decimal('45'), 'quantity': 10}, repository=repository)
        with self.assertRaises(StockLimitExceeded):
            services.restock(sweet.id, 5, repository=repository)
        self.assertEqual(sweet.quantity, MAX_QUANTITY)

    def test_quantity_never_negative(self):
        """Test stock stays non-negative across mixed operations"""
        operations = [('purchase', 30), ('restock', 5), ('purchase', 75), ('purchase', 1), ('restock', 10), ('purchase', 10)]
        for name, amount in operations:
            try:
                getattr(services, name)(self.gulab.id, amount, repository=self.repository)
            except (OutOfStock, InsufficientQuantity):
                pass
            self.assertGreaterEqual(self.gulab.quantity, 0)
        self.assertEqual(self.gulab.quantity, 0)

    def test_purchase_retries_after_lost_race(self):
        """Test purchase retries when stock changed underneath it"""
        repository = ContendedSweetRepository(conflicts=1)
        sweet = services.create({'name': 'Jalebi', 'category': 'Indian', 'price': Decimal('45'), 'quantity': 10}, repository=repository)
        sweet = services.purchase(sweet.id, 5, repository=repository)
        self.assertEqual(sweet.quantity, 5)
        self.assertEqual(repository.decrement_calls, 2)

    def test_purchase_lost_race_reports_current_stock(self):
        """Test a lost race is judged against the re-read stock"""
        repository = ContendedSweetRepository(conflicts=1, stolen=8)
        sweet = services.create({'name': 'Jalebi', 'category': 'Indian', 'price': Decimal('45'), 'quantity': 10}, repository=repository)
        with self.assertRaises(InsufficientQuantity) as ctx:
            services.purchase(sweet.id, 5, repository=repository)
        self.assertEqual(ctx.exception.available, 2)
        self.assertEqual(sweet.quantity, 2)

    def test_purchase_gives_up_after_repeated_conflicts(self):
        """Test purchase stops retrying after repeated conflicts"""
        repository = ContendedSweetRepository(conflicts=services.STOCK_UPDATE_ATTEMPTS)
        sweet = services.create({'name': 'Jalebi', 'category': 'Indian', 'price': Decimal('45'), 'quantity': 10}, repository=repository)
        with self.assertRaises(InsufficientQuantity):
            services.purchase(sweet.id, 5, repository=repository)
        self.assertEqual(sweet.quantity, 10)
        self.assertEqual(repository.decrement_calls, services.STOCK_UPDATE_ATTEMPTS)

    def test_update_keeps_absent_fields(self):
        """Test partial update leaves other fields alone"""
        sweet = services.update(self.gulab.id, {'price': Decimal('60.00')}, repository=self.repository)
        self.assertEqual(sweet.price, Decimal('60.00'))
        self.assertEqual(sweet.name, 'Gulab Jamun')
        self.assertEqual(sweet.quantity, 100)

    def test_update_missing_sweet(self):
        """Test updating a missing sweet"""
        with self.assertRaises(SweetNotFound):
            services.update(999, {'name': 'X'}, repository=self.repository)

    def test_remove(self):
        """Test removing a sweet"""
        services.remove(self.gulab.id, repository=self.repository)
        with self.assertRaises(SweetNotFound):
            services.find_one(self.gulab.id, repository=self.repository)
        with self.assertRaises(SweetNotFound):
            services.remove(self.gulab.id, repository=self.repository)

    def test_find_all_newest_first(self):
        """Test listing returns newest sweets first"""
        rasgulla = services.create(
            {'name': 'Rasgulla', 'category': 'Indian', 'price': Decimal('40.00'), 'quantity': 80},
            repository=self.repository
        )
        sweets = services.find_all(repository=self.repository)
        self.assertEqual([s.id for s in sweets], [rasgulla.id, self.gulab.id])


class SweetRepositoryTests(TestCase):
    """ORM-backed store: filters, ordering and conditional stock updates"""

    def setUp(self):
        self.repository = SweetRepository()
        self.gulab = TestDataFactory.create_sweet(name='Gulab Jamun', category='Indian', price=Decimal('50.00'), quantity=100)
        self.lower_gulab = TestDataFactory.create_sweet(name='gulab jamun', category='Indian', price=Decimal('30.00'), quantity=10)
        self.kaju = TestDataFactory.create_sweet(name='Kaju Katli', category='Indian', price=Decimal('80.00'), quantity=50)
        self.brownie = TestDataFactory.create_sweet(name='Brownie', category='Bakery', price=Decimal('60.00'), quantity=20)
        self.cookie = TestDataFactory.create_sweet(name='Cookie', category='Bakery', price=Decimal('29.99'), quantity=5)

    def test_name_filter_case_insensitive(self):
        """Test name filter ignores case"""
        names = {s.name for s in self.repository.list({'name': 'GULAB'})}
        self.assertEqual(names, {'Gulab Jamun', 'gulab jamun'})

    def test_category_filter(self):
        """Test category substring filter"""
        names = {s.name for s in self.repository.list({'category': 'bak'})}
        self.assertEqual(names, {'Brownie', 'Cookie'})

    def test_price_range_inclusive(self):
        """Test price bounds include their endpoints"""
        prices = {s.price for s in self.repository.list({'min_price': Decimal('30'), 'max_price': Decimal('60')})}
        self.assertEqual(prices, {Decimal('30.00'), Decimal('50.00'), Decimal('60.00')})

    def test_single_price_bound(self):
        """Test filtering on a lower price bound only"""
        names = {s.name for s in self.repository.list({'min_price': Decimal('60')})}
        self.assertEqual(names, {'Kaju Katli', 'Brownie'})

    def test_filters_combine(self):
        """Test filters are combined with AND"""
        names = [s.name for s in self.repository.list({'name': 'gulab', 'max_price': Decimal('40')})]
        self.assertEqual(names, ['gulab jamun'])

    def test_no_filters_returns_everything_newest_first(self):
        """Test an unfiltered list returns every sweet newest first"""
        sweets = self.repository.list()
        self.assertEqual([s.id for s in sweets], [self.cookie.id, self.brownie.id, self.kaju.id, self.lower_gulab.id, self.gulab.id])

    def test_decrement_is_conditional(self):
        """Test decrement refuses to go below zero"""
        self.assertFalse(self.repository.decrement_quantity(self.cookie.id, 6))
        self.cookie.refresh_from_db()
        self.assertEqual(self.cookie.quantity, 5)
        self.assertTrue(self.repository.decrement_quantity(self.cookie.id, 5))
        self.cookie.refresh_from_db()
        self.assertEqual(self.cookie.quantity, 0)

    def test_increment(self):
        """Test increment adds stock"""
        self.assertTrue(self.repository.increment_quantity(self.cookie.id, 7))
        self.cookie.refresh_from_db()
        self.assertEqual(self.cookie.quantity, 12)
        self.assertFalse(self.repository.increment_quantity(99999, 7))

    def test_increment_stops_at_stock_limit(self):
        """Test increment refuses to push quantity past MAX_QUANTITY"""
        self.assertFalse(self.repository.increment_quantity(self.cookie.id, MAX_QUANTITY - 4))
        self.cookie.refresh_from_db()
        self.assertEqual(self.cookie.quantity, 5)
        self.assertTrue(self.repository.increment_quantity(self.cookie.id, MAX_QUANTITY - 5))
        self.cookie.refresh_from_db()
        self.assertEqual(self.cookie.quantity, MAX_QUANTITY)


@override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
class SweetAPITests(TestCase):
    """Test sweet endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.sweet = TestDataFactory.create_sweet(name='Gulab Jamun', category='Indian', price=Decimal('50.00'), quantity=100)

    def sweet_payload(self, **overrides):
        data = {'name': 'Rasgulla', 'category': 'Indian', 'price': '40.00', 'quantity': 80}
        data.update(overrides)
        return data

    # Listing and retrieval

    def test_list_is_public(self):
        """Test listing sweets without a token"""
        response = self.client.get('/api/sweets/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsInstance(response.data, list)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Gulab Jamun')

    def test_list_with_filters(self):
        """Test listing sweets with category and price filters"""
        TestDataFactory.create_sweet(name='Brownie', category='Bakery', price=Decimal('70.00'))
        TestDataFactory.create_sweet(name='Jalebi', category='Indian', price=Decimal('45.00'))
        response = self.client.get('/api/sweets/?category=indian&min_price=30&max_price=60')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['Jalebi', 'Gulab Jamun'])

    def test_list_blank_filter_is_ignored(self):
        """Test a blank filter value is ignored"""
        response = self.client.get('/api/sweets/?name=')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_list_rejects_bad_price_bounds(self):
        """Test invalid price bounds return 400"""
        response = self.client.get('/api/sweets/?min_price=cheap')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('min_price', response.data)
        response = self.client.get('/api/sweets/?max_price=-1')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_get_sweet(self):
        """Test retrieving a sweet"""
        response = self.client.get(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.sweet.id)
        self.assertEqual(Decimal(str(response.data['price'])), Decimal('50.00'))
        self.assertEqual(response.data['quantity'], 100)

    def test_get_missing_sweet(self):
        """Test retrieving a missing sweet"""
        response = self.client.get('/api/sweets/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['detail'], 'Sweet with ID 99999 not found')

    def expired_token(self, user):
        token = AccessToken.for_user(user)
        token.set_exp(lifetime=-timedelta(minutes=1))
        return str(token)

    def test_reads_ignore_expired_token(self):
        """Test list and detail stay public when the bearer token has expired"""
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.expired_token(self.user)}')
        response = self.client.get('/api/sweets/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Gulab Jamun')

    def test_reads_ignore_malformed_token(self):
        """Test list and detail stay public when the bearer token is garbage"""
        self.client.credentials(HTTP_AUTHORIZATION='Bearer not-a-jwt')
        response = self.client.get('/api/sweets/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.get(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_writes_reject_expired_token(self):
        """Test an expired admin token still fails create and delete with 401"""
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {self.expired_token(self.admin)}')
        response = self.client.post('/api/sweets/', self.sweet_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        response = self.client.delete(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(Sweet.objects.count(), 1)

    # Create

    def test_admin_creates_sweet(self):
        """Test creating a sweet as admin"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets/', self.sweet_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Rasgulla')
        self.assertEqual(Sweet.objects.count(), 2)

    def test_create_requires_token(self):
        """Test creating a sweet without a token"""
        response = self.client.post('/api/sweets/', self.sweet_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(Sweet.objects.count(), 1)

    def test_create_forbidden_for_user_role(self):
        """Test creating a sweet as a regular user"""
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/sweets/', self.sweet_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Sweet.objects.count(), 1)

    def test_create_validation(self):
        """Test creating a sweet with invalid payloads"""
        self.client.authenticate_user(self.admin)
        invalid_payloads = [
            self.sweet_payload(name=''),
            self.sweet_payload(category=''),
            self.sweet_payload(price='0'),
            self.sweet_payload(price='-5'),
            self.sweet_payload(quantity=-1),
            self.sweet_payload(quantity='lots'),
            {'name': 'Rasgulla', 'category': 'Indian', 'price': '40.00'},
        ]
        for payload in invalid_payloads:
            response = self.client.post('/api/sweets/', payload, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, payload)
        self.assertEqual(Sweet.objects.count(), 1)

    def test_create_allows_duplicate_names(self):
        """Test sweet names need not be unique"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets/', self.sweet_payload(name='Gulab Jamun'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Sweet.objects.filter(name='Gulab Jamun').count(), 2)

    def test_create_rejects_quantity_beyond_column_range(self):
        """Test creating a sweet with more stock than the column holds fails with 400"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets/', self.sweet_payload(quantity=MAX_QUANTITY + 1), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('quantity', response.data)
        self.assertEqual(Sweet.objects.count(), 1)

    # Update and delete

    def test_admin_partial_update(self):
        """Test partially updating a sweet as admin"""
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/sweets/{self.sweet.id}/', {'price': '55.50'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.price, Decimal('55.50'))
        self.assertEqual(self.sweet.name, 'Gulab Jamun')
        self.assertEqual(self.sweet.quantity, 100)

    def test_update_rejects_non_positive_price(self):
        """Test updating a sweet to a zero price"""
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/sweets/{self.sweet.id}/', {'price': '0'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_missing_sweet(self):
        """Test updating a missing sweet"""
        self.client.authenticate_user(self.admin)
        response = self.client.patch('/api/sweets/99999/', {'name': 'Ghost'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_update_forbidden_for_user_role(self):
        """Test updating a sweet as a regular user"""
        self.client.authenticate_user(self.user)
        response = self.client.patch(f'/api/sweets/{self.sweet.id}/', {'name': 'Hacked'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes_sweet(self):
        """Test deleting a sweet as admin"""
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Sweet.objects.filter(id=self.sweet.id).exists())

    def test_delete_missing_sweet(self):
        """Test deleting a missing sweet"""
        self.client.authenticate_user(self.admin)
        response = self.client.delete('/api/sweets/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_forbidden_for_user_role(self):
        """Test deleting a sweet as a regular user"""
        self.client.authenticate_user(self.user)
        response = self.client.delete(f'/api/sweets/{self.sweet.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Sweet.objects.filter(id=self.sweet.id).exists())

    # Purchase and restock

    def test_purchase_restock_scenario(self):
        """Test purchase, restock and an oversized purchase via API"""
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {'quantity': 5}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 95)

        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 50}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 145)

        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {'quantity': 200}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Insufficient quantity. Available: 145, Requested: 200')
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 145)

    def test_purchase_out_of_stock(self):
        """Test purchasing an empty sweet"""
        empty = TestDataFactory.create_sweet(name='Barfi', quantity=0)
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{empty.id}/purchase/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['detail'], 'Sweet is out of stock')

    def test_purchase_entire_stock(self):
        """Test purchasing the whole stock"""
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {'quantity': 100}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], 0)

    def test_purchase_requires_token(self):
        """Test purchasing without a token"""
        response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_purchase_quantity_validation(self):
        """Test purchasing with invalid quantities"""
        self.client.authenticate_user(self.user)
        for quantity in (0, -3, 'two', None):
            response = self.client.post(f'/api/sweets/{self.sweet.id}/purchase/', {'quantity': quantity}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, quantity)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 100)

    def test_purchase_missing_sweet(self):
        """Test purchasing a missing sweet"""
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/sweets/99999/purchase/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_restock_forbidden_for_user_role(self):
        """Test restocking as a regular user"""
        self.client.authenticate_user(self.user)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 100)

    def test_restock_requires_token(self):
        """Test restocking without a token"""
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_restock_quantity_validation(self):
        """Test restocking with a zero quantity"""
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 0}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_restock_missing_sweet(self):
        """Test restocking a missing sweet"""
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/sweets/99999/restock/', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_restock_rejects_huge_quantity(self):
        """Test a restock amount beyond the column range fails with 400, not a server error"""
        self.client.authenticate_user(self.admin)
        for quantity in (MAX_QUANTITY + 1, 2 ** 63):
            response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': quantity}, format='json')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, quantity)
            self.assertIn('quantity', response.data)
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, 100)

    def test_restock_past_stock_limit(self):
        """Test a restock that would overflow the stored quantity fails with 400"""
        Sweet.objects.filter(id=self.sweet.id).update(quantity=MAX_QUANTITY - 10)
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 11}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(
            response.data['detail'],
            f'Restock would exceed the stock limit of {MAX_QUANTITY}. Available: {MAX_QUANTITY - 10}, Requested: 11'
        )
        self.sweet.refresh_from_db()
        self.assertEqual(self.sweet.quantity, MAX_QUANTITY - 10)

        response = self.client.post(f'/api/sweets/{self.sweet.id}/restock/', {'quantity': 10}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['quantity'], MAX_QUANTITY)


class SeedCommandTests(TestCase):
    """Test the seed_sweetflow management command"""

    @override_settings(PASSWORD_HASHERS=FAST_PASSWORD_HASHERS)
    def test_seed_is_idempotent(self):
        """Test seeding twice leaves one admin and five sweets"""
        from io import StringIO
        from django.core.management import call_command
        from django.contrib.auth import get_user_model

        call_command('seed_sweetflow', stdout=StringIO())
        call_command('seed_sweetflow', stdout=StringIO())

        admin = get_user_model().objects.get(email='admin@sweetflow.com')
        self.assertEqual(admin.role, 'ADMIN')
        self.assertTrue(admin.check_password('admin123'))
        self.assertEqual(Sweet.objects.count(), 5)
        self.assertEqual(Sweet.objects.get(name='Gulab Jamun').quantity, 100)
