"""Unit tests for PosBackendClient."""

from decimal import Decimal
from typing import Any
from unittest.mock import ANY, AsyncMock, MagicMock, patch

import httpx
import pytest

from pos_ordering_client.models.catalog_models import Product
from pos_ordering_client.models.table_models import TableStatus
from pos_ordering_client.models.transaction_models import TransactionItem, TransactionRequest
from pos_ordering_client.services.pos_backend_client import PosBackendClient


def make_response(payload: Any = None, status_code: int = 200, content: bytes = b"{}") -> MagicMock:
    """Build a mock httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error", request=MagicMock(), response=response
        )
    return response


@pytest.mark.unit
class TestPosBackendClient:
    """Test suite for PosBackendClient."""

    @pytest.fixture
    def client(self) -> PosBackendClient:
        """Create a PosBackendClient with test configuration."""
        return PosBackendClient(base_url="https://pos.test.com/api/", auth_token="test-token")

    def test_client_initialization(self, client: PosBackendClient) -> None:
        """Test that the trailing slash is stripped from the base URL."""
        assert client.base_url == "https://pos.test.com/api"
        assert client.auth_token == "test-token"
        assert client.timeout == 10.0

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self, client: PosBackendClient) -> None:
        mock_request = AsyncMock(return_value=make_response([]))

        with patch("httpx.AsyncClient.request", mock_request):
            await client.get_products()

        method, url = mock_request.call_args.args
        assert method == "GET"
        assert url == "https://pos.test.com/api/products"
        assert mock_request.call_args.kwargs["headers"]["Authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_omits_auth_header_without_token(self) -> None:
        client = PosBackendClient(base_url="https://pos.test.com/api")
        mock_request = AsyncMock(return_value=make_response([]))

        with patch("httpx.AsyncClient.request", mock_request):
            await client.get_categories()

        assert "Authorization" not in mock_request.call_args.kwargs["headers"]

    # Catalog

    @pytest.mark.asyncio
    async def test_get_products_success(self, client: PosBackendClient) -> None:
        """Test that backend product records are parsed, including snake_case variants."""
        payload = [
            {
                "id": 1,
                "name": "Kopi Susu",
                "price": "18000.00",
                "category_name": "Drinks",
                "category_id": 3,
                "image_url": "https://example.com/kopi.jpg",
                "stock": 12,
            },
            {"id": "2", "name": "Roti", "price": 9000, "category": "c2"},
        ]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            products = await client.get_products()

        assert products is not None
        assert isinstance(products[0], Product)
        assert products[0].id == "1"
        assert products[0].price == Decimal("18000.00")
        assert products[0].category == "Drinks"
        assert products[0].category_id == "3"
        assert products[0].image == "https://example.com/kopi.jpg"
        assert products[0].stock == 12
        assert products[1].category == "c2"
        assert products[1].category_id is None
        assert products[1].available is True

    @pytest.mark.asyncio
    async def test_get_products_uncategorized(self, client: PosBackendClient) -> None:
        payload = [{"id": "9", "name": "Air", "price": 5000}]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            products = await client.get_products()

        assert products[0].category == "Uncategorized"

    @pytest.mark.asyncio
    async def test_get_products_api_error(self, client: PosBackendClient) -> None:
        """Test that API errors return None."""
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response(status_code=500),
        ):
            assert await client.get_products() is None

    @pytest.mark.asyncio
    async def test_get_products_network_error(self, client: PosBackendClient) -> None:
        """Test that network errors return None."""
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.RequestError("Connection failed", request=MagicMock()),
        ):
            assert await client.get_products() is None

    @pytest.mark.asyncio
    async def test_get_products_malformed_payload(self, client: PosBackendClient) -> None:
        payload = [{"id": "1", "price": 1000}]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            assert await client.get_products() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "item",
        [
            {"id": 1, "name": "Kopi", "price": None, "category_name": "Drinks"},
            {"id": 1, "name": "Kopi", "price": "gratis", "category_name": "Drinks"},
            {"id": 1, "name": "Kopi", "price": 18000, "stock": "banyak"},
        ],
    )
    async def test_get_products_bad_numbers(self, client: PosBackendClient, item: dict) -> None:
        """Test that an unparseable price or stock is reported as a failed read."""
        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response([item])
        ):
            assert await client.get_products() is None

    @pytest.mark.asyncio
    async def test_get_categories_success(self, client: PosBackendClient) -> None:
        payload = [{"id": 1, "name": "Drinks", "icon": "Coffee", "count": 40}, {"id": 2, "name": "Food"}]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            categories = await client.get_categories()

        assert [c.id for c in categories] == ["1", "2"]
        assert categories[0].icon == "Coffee"
        assert categories[0].count == 0
        assert categories[1].icon == "Box"

    @pytest.mark.asyncio
    async def test_get_customers_success(self, client: PosBackendClient) -> None:
        payload = [{"id": 5, "name": "Budi", "phone": "0812"}]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            customers = await client.get_customers()

        assert customers[0].id == "5"
        assert customers[0].phone == "0812"
        assert customers[0].email is None

    # Transactions

    @pytest.mark.asyncio
    async def test_create_transaction_success(self, client: PosBackendClient) -> None:
        """Test that the transaction body uses productId and the id is returned."""
        mock_request = AsyncMock(return_value=make_response({"id": 321}))
        request = TransactionRequest(
            items=[TransactionItem(product_id="p1", quantity=2, price=Decimal("10"))],
            total=Decimal("20"),
        )

        with patch("httpx.AsyncClient.request", mock_request):
            transaction_id = await client.create_transaction(request)

        assert transaction_id == "321"
        assert mock_request.call_args.args == ("POST", "https://pos.test.com/api/transactions")
        assert mock_request.call_args.kwargs["json"] == {
            "items": [{"productId": "p1", "quantity": 2, "price": 10.0}],
            "total": 20.0,
            "status": "completed",
        }

    @pytest.mark.asyncio
    async def test_create_transaction_empty_body(self, client: PosBackendClient) -> None:
        request = TransactionRequest(
            items=[TransactionItem(product_id="p1", quantity=1, price=Decimal("10"))],
            total=Decimal("10"),
        )

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response(content=b""),
        ):
            transaction_id = await client.create_transaction(request)

        assert transaction_id == ""

    @pytest.mark.asyncio
    async def test_create_transaction_failure(self, client: PosBackendClient) -> None:
        request = TransactionRequest(
            items=[TransactionItem(product_id="p1", quantity=1, price=Decimal("10"))],
            total=Decimal("10"),
        )

        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response(status_code=422),
        ):
            assert await client.create_transaction(request) is None

    # Payment methods

    @pytest.mark.asyncio
    async def test_get_payment_methods(
        self, client: PosBackendClient, mock_payment_method_records: list[dict]
    ) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response(mock_payment_method_records),
        ):
            records = await client.get_payment_methods()

        assert [r.id for r in records] == ["cash", "qris-static", "42"]
        assert records[1].config == {"qrImage": "https://example.com/qr.png"}
        assert records[2].is_default is False

    @pytest.mark.asyncio
    async def test_update_payment_method(self, client: PosBackendClient) -> None:
        mock_request = AsyncMock(return_value=make_response({"success": True}))
        body = {"enabled": True, "fee": 0.7, "feeType": "percentage", "config": {}}

        with patch("httpx.AsyncClient.request", mock_request):
            result = await client.update_payment_method("qris-static", body)

        assert result is True
        assert mock_request.call_args.args == ("PUT", "https://pos.test.com/api/payment-methods/qris-static")
        assert mock_request.call_args.kwargs["json"] == body

    @pytest.mark.asyncio
    async def test_update_payment_method_failure(self, client: PosBackendClient) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection refused", request=MagicMock()),
        ):
            assert await client.update_payment_method("cash", {}) is False

    @pytest.mark.asyncio
    async def test_create_custom_payment_method(self, client: PosBackendClient) -> None:
        mock_request = AsyncMock(return_value=make_response({"id": 88}))

        with patch("httpx.AsyncClient.request", mock_request):
            method_id = await client.create_custom_payment_method({"name": "Voucher"})

        assert method_id == "88"
        assert mock_request.call_args.args == ("POST", "https://pos.test.com/api/payment-methods/custom")

    @pytest.mark.asyncio
    async def test_create_custom_payment_method_without_id(self, client: PosBackendClient) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response({"success": True}),
        ):
            assert await client.create_custom_payment_method({"name": "Voucher"}) is None

    @pytest.mark.asyncio
    async def test_delete_custom_payment_method(self, client: PosBackendClient) -> None:
        mock_request = AsyncMock(return_value=make_response(content=b""))

        with patch("httpx.AsyncClient.request", mock_request):
            result = await client.delete_custom_payment_method("88")

        assert result is True
        assert mock_request.call_args.args == ("DELETE", "https://pos.test.com/api/payment-methods/custom/88")

    # Tables

    @pytest.mark.asyncio
    async def test_get_tables(self, client: PosBackendClient) -> None:
        payload = [{"id": "t1", "tableNumber": "1", "capacity": 4, "area": "Indoor", "status": "reserved"}]

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            tables = await client.get_tables()

        assert tables[0].status == TableStatus.RESERVED
        assert tables[0].table_number == "1"

    @pytest.mark.asyncio
    async def test_create_table(self, client: PosBackendClient) -> None:
        payload = {"id": "t7", "tableNumber": "7", "capacity": 2, "area": "Indoor", "status": "available"}

        with patch(
            "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response(payload)
        ):
            table = await client.create_table({"tableNumber": "7", "capacity": 2, "area": "Indoor"})

        assert table is not None
        assert table.id == "t7"

    @pytest.mark.asyncio
    async def test_create_table_malformed_response(self, client: PosBackendClient) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response({"success": True}),
        ):
            assert await client.create_table({"tableNumber": "7"}) is None

    @pytest.mark.asyncio
    async def test_update_table_status(self, client: PosBackendClient) -> None:
        mock_request = AsyncMock(return_value=make_response({}))

        with patch("httpx.AsyncClient.request", mock_request):
            result = await client.update_table_status("t1", TableStatus.OCCUPIED, "ord_1")

        assert result is True
        assert mock_request.call_args.args == ("PUT", "https://pos.test.com/api/tables/t1/status")
        assert mock_request.call_args.kwargs["json"] == {"status": "occupied", "currentOrderId": "ord_1"}

    @pytest.mark.asyncio
    async def test_update_and_delete_table_failures(self, client: PosBackendClient) -> None:
        with patch(
            "httpx.AsyncClient.request",
            new_callable=AsyncMock,
            return_value=make_response(status_code=404),
        ):
            assert await client.update_table("t1", {"capacity": 4}) is False
            assert await client.delete_table("t1") is False

    @pytest.mark.asyncio
    async def test_metrics_use_route_template(self, client: PosBackendClient) -> None:
        """Test that backend latency is labelled by route, not by the concrete id."""
        with (
            patch(
                "httpx.AsyncClient.request", new_callable=AsyncMock, return_value=make_response({})
            ),
            patch("pos_ordering_client.services.pos_backend_client.record_backend_call") as mock_record,
        ):
            await client.update_table_status("t123", TableStatus.AVAILABLE)
            await client.delete_custom_payment_method("88")
            await client.get_tables()

        assert [c.args[:2] for c in mock_record.call_args_list] == [
            ("PUT", "/tables/{id}/status"),
            ("DELETE", "/payment-methods/custom/{id}"),
            ("GET", "/tables"),
        ]
        mock_record.assert_called_with("GET", "/tables", ANY)
