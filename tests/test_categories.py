"""
Category and community reference data tests
"""
import json

from connector import db
from connector.models import ServiceCategory


class TestCategories:

    def test_list_active(self, client, category, subcategory):
        inactive = ServiceCategory(name='Retired', is_active=False)
        db.session.add(inactive)
        db.session.commit()

        response = client.get('/api/categories')
        assert response.status_code == 200
        names = {c['name'] for c in json.loads(response.data)['data']}
        assert names == {'Home Repair', 'Plumbing'}

    def test_admin_creates(self, client, admin_headers):
        response = client.post('/api/categories', headers=admin_headers, json={
            'name': 'Tutoring',
            'description': 'Lessons at home',
            'form_fields': [{'name': 'subjects', 'type': 'text'}],
        })
        assert response.status_code == 201
        data = json.loads(response.data)['data']
        assert data['name'] == 'Tutoring'
        assert data['form_fields'] == [{'name': 'subjects', 'type': 'text'}]

    def test_non_admin_forbidden(self, client, provider_headers):
        response = client.post('/api/categories', headers=provider_headers, json={'name': 'Tutoring'})
        assert response.status_code == 403

    def test_duplicate_name(self, client, admin_headers, category):
        response = client.post('/api/categories', headers=admin_headers, json={'name': 'Home Repair'})
        assert response.status_code == 409

    def test_name_length(self, client, admin_headers):
        response = client.post('/api/categories', headers=admin_headers, json={'name': 'x' * 51})
        assert response.status_code == 400

    def test_depth_limited_to_two(self, client, admin_headers, subcategory):
        response = client.post('/api/categories', headers=admin_headers,
                               json={'name': 'Pipes', 'parent_id': subcategory.id})
        assert response.status_code == 400

    def test_delete_unused(self, client, admin_headers, app):
        category = ServiceCategory(name='Pet care')
        db.session.add(category)
        db.session.commit()
        category_id = category.id

        response = client.delete(f'/api/categories/{category_id}', headers=admin_headers)
        assert response.status_code == 200
        db.session.expire_all()
        assert db.session.get(ServiceCategory, category_id) is None

    def test_delete_with_subcategories_conflicts(self, client, admin_headers, category, subcategory):
        response = client.delete(f'/api/categories/{category.id}', headers=admin_headers)
        assert response.status_code == 409

    def test_delete_used_by_service_conflicts(self, client, admin_headers, category, service):
        response = client.delete(f'/api/categories/{category.id}', headers=admin_headers)
        assert response.status_code == 409

    def test_delete_used_as_subcategory_conflicts(self, client, admin_headers, subcategory, make_service, provider):
        make_service(provider, subcategory_id=subcategory.id)
        response = client.delete(f'/api/categories/{subcategory.id}', headers=admin_headers)
        assert response.status_code == 409

    def test_delete_missing(self, client, admin_headers):
        assert client.delete('/api/categories/missing', headers=admin_headers).status_code == 404


class TestCommunities:

    def test_list_and_get(self, client, community):
        response = client.get('/api/communities')
        data = json.loads(response.data)
        assert data['count'] == 1

        response = client.get(f'/api/communities/{community.id}')
        data = json.loads(response.data)['data']
        assert data['name'] == 'Green Meadows'
        assert data['address']['postal_code'] == '411001'
        assert data['buildings'] == ['A', 'B']

    def test_get_missing(self, client):
        assert client.get('/api/communities/missing').status_code == 404

    def test_admin_creates(self, client, admin_headers):
        response = client.post('/api/communities', headers=admin_headers, json={
            'name': 'Palm Grove',
            'city': 'Goa',
            'state': 'Goa',
            'postal_code': '403001',
            'community_type': 'neighborhood',
            'amenities': ['pool'],
        })
        assert response.status_code == 201
        assert json.loads(response.data)['data']['community_type'] == 'neighborhood'

    def test_invalid_type(self, client, admin_headers):
        response = client.post('/api/communities', headers=admin_headers, json={
            'name': 'Palm Grove', 'city': 'Goa', 'state': 'Goa', 'postal_code': '403001',
            'community_type': 'castle',
        })
        assert response.status_code == 400

    def test_customer_forbidden(self, client, customer_headers):
        response = client.post('/api/communities', headers=customer_headers, json={'name': 'Mine'})
        assert response.status_code == 403
