from unittest import TestCase
from unittest.mock import patch

import breakout.endpoints as endpoints
from breakout.endpoints import ENDPOINTS, IGNORED_PATH_VALUE, Endpoint, EndpointRegistry, Param
from breakout.exceptions import DuplicateEndpointError
from breakout.models import AuthMode


class EndpointRegistryTests(TestCase):
    def test_duplicate_name_is_rejected(self):
        with self.assertRaises(DuplicateEndpointError):
            EndpointRegistry(
                [
                    Endpoint("upload_image", "POST", "/media/a/"),
                    Endpoint("upload_image", "POST", "/media/b/"),
                ]
            )

    def test_duplicate_route_is_rejected_even_with_other_param_names(self):
        registry = EndpointRegistry([Endpoint("update_user_data", "PUT", "/user/{user_id}/")])
        with self.assertRaises(DuplicateEndpointError):
            registry.register(Endpoint("become_participant", "PUT", "/user/{id}/"))

    def test_same_path_with_other_method_is_allowed(self):
        registry = EndpointRegistry(
            [
                Endpoint("get_user", "GET", "/user/{user_id}/"),
                Endpoint("update_user", "PUT", "/user/{user_id}/"),
            ]
        )
        self.assertEqual(len(registry), 2)
        self.assertIn("update_user", registry)

    def test_table_is_consistent(self):
        for endpoint in ENDPOINTS:
            with self.subTest(endpoint=endpoint.name):
                self.assertTrue(endpoint.path.startswith("/"))
                self.assertIn(endpoint.method, ("GET", "POST", "PUT", "DELETE"))
                for name in endpoint.ignored:
                    self.assertIn(name, endpoint.path_params)
                self.assertFalse(endpoint.body is not None and endpoint.fields)

    def test_documented_routes_and_auth(self):
        expected = {
            "get_me": ("GET", "/me/", AuthMode.BEARER),
            "create_account": ("POST", "/user/", AuthMode.CLIENT),
            "update_user": ("PUT", "/user/{user_id}/", AuthMode.BEARER),
            "get_all_events": ("GET", "/event/", AuthMode.BEARER),
            "get_invitations": ("GET", "/event/{event_id}/team/invitation/", AuthMode.BEARER),
            "create_team": ("POST", "/event/{event_id}/team/", AuthMode.BEARER),
            "get_team_by_id": ("GET", "/event/{event_id}/team/{team_id}/", AuthMode.BEARER),
            "create_posting": ("POST", "/posting/", AuthMode.BEARER),
            "like_posting": ("POST", "/posting/{posting_id}/like/", AuthMode.BEARER),
            "fetch_invoices_for_event": ("GET", "/sponsoringinvoice/{event_id}/", AuthMode.BEARER),
        }
        for name, (method, path, auth) in expected.items():
            with self.subTest(endpoint=name):
                endpoint = ENDPOINTS.get(name)
                self.assertEqual((endpoint.method, endpoint.path, endpoint.auth), (method, path, auth))


class EndpointBuildTests(TestCase):
    def test_ignored_event_id_uses_placeholder(self):
        descriptor = ENDPOINTS.get("get_team_by_id").build(42)
        self.assertEqual(descriptor.path, f"/event/{IGNORED_PATH_VALUE}/team/42/")
        self.assertEqual(descriptor.path, "/event/-1/team/42/")

    def test_ignored_parameter_can_still_be_given(self):
        descriptor = ENDPOINTS.get("get_team_by_id").build(42, event_id=3)
        self.assertEqual(descriptor.path, "/event/3/team/42/")

    def test_challenge_status_path_ignores_event_and_team(self):
        descriptor = ENDPOINTS.get("change_challenge_status").build(7, status="WITH_PROOF", posting_id=9)
        self.assertEqual(descriptor.path, "/event/-1/team/-1/challenge/7/status/")
        self.assertEqual(descriptor.json, {"status": "WITH_PROOF", "postingId": 9})

    def test_positional_and_keyword_path_params(self):
        endpoint = ENDPOINTS.get("change_sponsoring_status")
        by_position = endpoint.build(1, 2, 3, status="accepted")
        by_keyword = endpoint.build(event_id=1, team_id=2, sponsoring_id=3, status="accepted")
        self.assertEqual(by_position, by_keyword)
        self.assertEqual(by_position.path, "/event/1/team/2/sponsoring/3/status/")

    def test_path_segments_are_percent_encoded(self):
        descriptor = ENDPOINTS.get("search_user").build("a b/c?")
        self.assertEqual(descriptor.path, "/user/search/a%20b%2Fc%3F/")

    def test_missing_required_argument(self):
        with self.assertRaises(TypeError):
            ENDPOINTS.get("get_invitations").build()
        with self.assertRaises(TypeError):
            ENDPOINTS.get("check_email_existence").build()
        with self.assertRaises(TypeError):
            ENDPOINTS.get("update_user").build(5)

    def test_unexpected_arguments(self):
        with self.assertRaises(TypeError):
            ENDPOINTS.get("get_me").build(1)
        with self.assertRaises(TypeError):
            ENDPOINTS.get("get_me").build(bogus=True)
        with self.assertRaises(TypeError):
            ENDPOINTS.get("get_user").build(1, user_id=1)

    def test_query_defaults_and_wire_names(self):
        descriptor = ENDPOINTS.get("fetch_locations_for_team").build(8)
        self.assertEqual(descriptor.path, "/event/-1/team/8/location/")
        self.assertEqual(descriptor.query, {"perTeam": 100})

        descriptor = ENDPOINTS.get("fetch_invoices_for_event").build(1)
        self.assertEqual(descriptor.query, {"detailed": False})

    def test_optional_query_params_are_omitted(self):
        self.assertEqual(ENDPOINTS.get("fetch_postings").build(page=2).query, {"page": 2})
        self.assertEqual(ENDPOINTS.get("fetch_postings").build(limit=10).query, {"page": 0, "limit": 10})

    def test_postings_start_at_first_page(self):
        self.assertEqual(ENDPOINTS.get("fetch_postings").build().query, {"page": 0})

    def test_open_query_passes_search_parameters(self):
        descriptor = ENDPOINTS.get("search_invoices").build(params={"firstname": "Ada", "company": "A&B"})
        self.assertEqual(descriptor.query, {"firstname": "Ada", "company": "A&B"})

    @patch.object(endpoints.time, "time", return_value=1500000000.75)
    def test_body_fields_skip_none_and_stamp_date(self, _mock_time):
        descriptor = ENDPOINTS.get("create_posting").build(text="This is a test post")
        self.assertEqual(descriptor.json, {"text": "This is a test post", "date": 1500000000.75})

        descriptor = ENDPOINTS.get("like_posting").build(12)
        self.assertEqual(descriptor.json, {"date": 1500000000})

    def test_body_field_defaults(self):
        descriptor = ENDPOINTS.get("create_account").build(email="a@b.c", password="pw")
        self.assertEqual(descriptor.json, {"email": "a@b.c", "password": "pw", "newsletter": False})
        self.assertEqual(descriptor.auth, AuthMode.CLIENT)

    def test_raw_body(self):
        descriptor = ENDPOINTS.get("create_group_message").build(body=[1, 2, 3])
        self.assertEqual(descriptor.json, [1, 2, 3])
        self.assertEqual(ENDPOINTS.get("sign_cloudinary_params").build().json, {})

    def test_param_take_requires_value(self):
        with self.assertRaises(TypeError):
            Param("email").take({"email": None}, "demo")
        self.assertEqual(Param("per_team", default=100).take({}, "demo"), 100)
