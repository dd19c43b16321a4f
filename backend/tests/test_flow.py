from datetime import date, timedelta
from decimal import Decimal
from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook

HOY = date.today()


def register_user(client: TestClient, email: str, password: str) -> None:
    payload = {
        "email": email,
        "password": password,
        "full_name": "Usuario Test",
    }
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201


def login(client: TestClient, email: str, password: str) -> str:
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def new_user(client: TestClient, email: str) -> dict[str, str]:
    password = "Password123!"
    register_user(client, email, password)
    return auth_headers(login(client, email, password))


def crear_registro(client: TestClient, headers: dict, **overrides) -> dict:
    payload = {
        "fecha": str(HOY),
        "beo": "BEO-1",
        "salon": "Salón Imperial",
        "compania": "Banco Andino",
        "item": "Iluminación escenario",
        "tipo": "Venta",
        "valor": "1000",
        "cantidad": "2",
    }
    payload.update(overrides)
    response = client.post("/registros", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Request-ID"]


def test_auth_register_login_me_and_logout(client: TestClient):
    email = "usuario1@example.com"
    password = "Password123!"
    register_user(client, email, password)

    duplicated = client.post(
        "/auth/register", json={"email": email, "password": password, "full_name": "Otro"}
    )
    assert duplicated.status_code == 400
    assert duplicated.json()["detail"] == "Email ya registrado"

    bad = client.post("/auth/login", json={"email": email, "password": "incorrecta"})
    assert bad.status_code == 401

    token = login(client, email, password)
    me = client.get("/auth/me", headers=auth_headers(token))
    assert me.status_code == 200
    assert me.json()["email"] == email
    assert me.json()["role"] == "user"

    logout = client.post("/auth/logout", headers=auth_headers(token))
    assert logout.status_code == 204

    after = client.get("/auth/me", headers=auth_headers(token))
    assert after.status_code == 401
    assert after.json()["detail"] == "Sesión cerrada"


def test_requires_authentication(client: TestClient):
    assert client.get("/registros").status_code == 401
    assert client.get("/eventos").status_code == 401


def test_registro_crud_recomputes_total(client: TestClient):
    headers = new_user(client, "registros@example.com")

    registro = crear_registro(client, headers, valor="1500.50", cantidad="2")
    assert Decimal(registro["total"]) == Decimal("3001.00")

    payload = {
        "fecha": str(HOY),
        "beo": "BEO-1",
        "salon": "Salón Imperial",
        "compania": "Banco Andino",
        "item": "Iluminación escenario",
        "tipo": "Venta",
        "valor": "1500.50",
        "cantidad": "3",
    }
    updated = client.put(f"/registros/{registro['id']}", json=payload, headers=headers)
    assert updated.status_code == 200
    assert Decimal(updated.json()["total"]) == Decimal("4501.50")

    listed = client.get("/registros", params={"q": "imperial"}, headers=headers)
    assert [r["id"] for r in listed.json()] == [registro["id"]]
    assert client.get("/registros", params={"q": "no-existe"}, headers=headers).json() == []

    deleted = client.delete(f"/registros/{registro['id']}", headers=headers)
    assert deleted.status_code == 204
    assert client.get("/registros", headers=headers).json() == []

    missing = client.delete(f"/registros/{registro['id']}", headers=headers)
    assert missing.status_code == 404


def test_registro_validation(client: TestClient):
    headers = new_user(client, "validacion@example.com")
    base = {
        "fecha": str(HOY),
        "salon": "Salón A",
        "compania": "Acme",
        "item": "Sonido",
        "tipo": "Venta",
        "valor": "10",
        "cantidad": "1",
    }
    assert client.post("/registros", json={**base, "salon": "A|B"}, headers=headers).status_code == 422
    assert client.post("/registros", json={**base, "cantidad": "0"}, headers=headers).status_code == 422
    assert client.post("/registros", json={**base, "valor": "-1"}, headers=headers).status_code == 422
    assert client.post("/registros", json={**base, "tipo": "Otro"}, headers=headers).status_code == 422
    assert client.post("/registros", json={**base, "item": "   "}, headers=headers).status_code == 422


def assert_totales_exactos(registros: list[dict]) -> None:
    for r in registros:
        assert Decimal(r["total"]) == Decimal(r["valor"]) * Decimal(r["cantidad"])


def test_registro_total_matches_stored_amounts(client: TestClient):
    headers = new_user(client, "centavos@example.com")

    tres_decimales = client.post(
        "/registros",
        json={"fecha": str(HOY), "salon": "A", "compania": "Acme", "item": "Luz", "valor": "1.005", "cantidad": "3"},
        headers=headers,
    )
    assert tres_decimales.status_code == 422

    registro = crear_registro(client, headers, valor="1.01", cantidad="2.55")
    assert Decimal(registro["total"]) == Decimal("2.5755")

    payload = {
        "fecha": str(HOY),
        "salon": "Salón Imperial",
        "compania": "Banco Andino",
        "item": "Sonido",
        "valor": "19.99",
        "cantidad": "0.75",
    }
    updated = client.put(f"/registros/{registro['id']}", json=payload, headers=headers)
    assert updated.status_code == 200

    stored = client.get("/registros", headers=headers).json()
    assert [Decimal(r["total"]) for r in stored] == [Decimal("14.9925")]
    assert_totales_exactos(stored)


def test_registro_rejects_amounts_that_do_not_fit(client: TestClient):
    headers = new_user(client, "montos@example.com")
    base = {"fecha": str(HOY), "salon": "A", "compania": "Acme", "item": "Luz"}

    valor_enorme = client.post("/registros", json={**base, "valor": "1000000000000", "cantidad": "1"}, headers=headers)
    assert valor_enorme.status_code == 422

    total_enorme = client.post(
        "/registros", json={**base, "valor": "999999999999.99", "cantidad": "1000"}, headers=headers
    )
    assert total_enorme.status_code == 422
    assert client.get("/registros", headers=headers).json() == []


def test_registros_are_private(client: TestClient):
    owner = new_user(client, "duenio@example.com")
    other = new_user(client, "ajeno@example.com")
    registro = crear_registro(client, owner)

    assert client.get("/registros", headers=other).json() == []
    response = client.delete(f"/registros/{registro['id']}", headers=other)
    assert response.status_code == 404


def test_eventos_grouping_and_pagination(client: TestClient):
    headers = new_user(client, "eventos@example.com")
    for dias in range(12):
        crear_registro(client, headers, fecha=str(HOY - timedelta(days=dias)), valor="100", cantidad="1")
    crear_registro(client, headers, item="Sonido", valor="50", cantidad="2")

    first = client.get("/eventos", headers=headers)
    assert first.status_code == 200
    body = first.json()
    assert body["total_eventos"] == 12
    assert body["total_paginas"] == 2
    assert len(body["eventos"]) == 10

    top = body["eventos"][0]
    assert top["fecha"] == str(HOY)
    assert top["cantidad_items"] == 2
    assert Decimal(top["total"]) == Decimal("200")
    assert Decimal(top["iva"]) == Decimal("38.00")
    assert Decimal(top["total_con_iva"]) == Decimal("238.00")

    second = client.get("/eventos", params={"pagina": 2}, headers=headers).json()
    assert len(second["eventos"]) == 2

    asc = client.get("/eventos", params={"orden": "fecha", "descendente": False}, headers=headers).json()
    assert asc["eventos"][0]["fecha"] == str(HOY - timedelta(days=11))

    bad = client.get("/eventos", params={"orden": "nada"}, headers=headers)
    assert bad.status_code == 400

    detalle = client.get("/eventos/detalle", params={"key": top["key"]}, headers=headers)
    assert detalle.status_code == 200
    assert len(detalle.json()["items"]) == 2
    assert detalle.json()["reservas"] == []


def test_inventario_y_reservas(client: TestClient):
    headers = new_user(client, "inventario@example.com")
    crear_registro(client, headers, salon="Terraza", compania="Minera del Sur")
    key = f"{HOY.isoformat()}|Terraza|Minera del Sur"

    articulo = client.post(
        "/articulos",
        json={
            "codigo_articulo": "ILU-001",
            "grupo": "Iluminación",
            "subgrupo": "Robótica",
            "descripcion": "Cabeza móvil",
            "en_stock": 10,
        },
        headers=headers,
    )
    assert articulo.status_code == 201, articulo.text
    articulo_id = articulo.json()["id"]

    dup = client.post(
        "/articulos",
        json={"codigo_articulo": "ILU-001", "grupo": "X", "subgrupo": "Y", "descripcion": "Z", "en_stock": 1},
        headers=headers,
    )
    assert dup.status_code == 400
    assert dup.json()["detail"] == "Código de artículo duplicado"

    reserva = client.post(
        "/reservas",
        json={"articulo_id": articulo_id, "evento_key": key, "cantidad_reservada": 6},
        headers=headers,
    )
    assert reserva.status_code == 201, reserva.text
    reserva_id = reserva.json()["id"]

    excede = client.post(
        "/reservas",
        json={"articulo_id": articulo_id, "evento_key": key, "cantidad_reservada": 5},
        headers=headers,
    )
    assert excede.status_code == 400
    assert excede.json()["detail"] == "La cantidad (5) excede el stock disponible (4)."

    cero = client.post(
        "/reservas",
        json={"articulo_id": articulo_id, "evento_key": key, "cantidad_reservada": 0},
        headers=headers,
    )
    assert cero.status_code == 400
    assert cero.json()["detail"] == "Por favor selecciona un artículo y una cantidad válida."

    sin_evento = client.post(
        "/reservas",
        json={"articulo_id": articulo_id, "evento_key": "2001-01-01|Nada|Nadie", "cantidad_reservada": 1},
        headers=headers,
    )
    assert sin_evento.status_code == 404

    # editar no descuenta la propia reserva
    edit = client.put(f"/reservas/{reserva_id}", json={"cantidad_reservada": 10}, headers=headers)
    assert edit.status_code == 200
    assert edit.json()["cantidad_reservada"] == 10

    disp = client.get(f"/articulos/{articulo_id}/disponibilidad", headers=headers).json()
    assert disp == {"articulo_id": articulo_id, "en_stock": 10, "reservado": 10, "disponible": 0}
    disp_excl = client.get(
        f"/articulos/{articulo_id}/disponibilidad",
        params={"excluir_reserva_id": reserva_id},
        headers=headers,
    ).json()
    assert disp_excl["disponible"] == 10

    listado = client.get("/articulos", headers=headers).json()
    assert listado[0]["reservado"] == 10
    assert listado[0]["disponible"] == 0

    detalle = client.get("/eventos/detalle", params={"key": key}, headers=headers).json()
    assert detalle["reservas"][0]["codigo_articulo"] == "ILU-001"
    assert detalle["reservas"][0]["cantidad_reservada"] == 10

    por_evento = client.get("/reservas", params={"evento_key": key}, headers=headers).json()
    assert [r["id"] for r in por_evento] == [reserva_id]

    borrar = client.delete(f"/articulos/{articulo_id}", headers=headers)
    assert borrar.status_code == 204
    assert client.get("/reservas", headers=headers).json() == []


def test_import_and_export(client: TestClient):
    headers = new_user(client, "planillas@example.com")
    csv = (
        "Fecha,Código Evento,Salón,Compañía,Ítem,Tipo,Valor,Cantidad\n"
        "15-03-2024,B1,Salón A,Acme,Iluminación LED,Venta,100,2\n"
        "2024-03-15,B1,Salón A,Acme,Sonido,estandar,50,1\n"
        ",B2,Salón B,Acme,Pantalla,Venta,10,1\n"
        "16-03-2024,B3,Salón B,Beta,Pantalla,Venta,0,1\n"
    ).encode("utf-8")
    response = client.post(
        "/archivos/importar",
        files={"archivo": ("registros.csv", csv, "text/csv")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["insertados"] == 2
    assert [o["fila"] for o in body["omitidas"]] == [4, 5]

    eventos = client.get("/eventos", headers=headers).json()
    assert eventos["total_eventos"] == 1
    assert eventos["eventos"][0]["key"] == "2024-03-15|Salón A|Acme"
    assert Decimal(eventos["eventos"][0]["total"]) == Decimal("250")

    vacio = client.post(
        "/archivos/importar",
        files={"archivo": ("vacio.csv", b"Fecha,Salon\n01-01-2024,\n", "text/csv")},
        headers=headers,
    )
    assert vacio.status_code == 400
    assert vacio.json()["detail"] == "El archivo está vacío o no tiene el formato correcto."

    formato = client.post(
        "/archivos/importar",
        files={"archivo": ("datos.txt", b"hola", "text/plain")},
        headers=headers,
    )
    assert formato.status_code == 400
    assert formato.json()["detail"].startswith("Error al procesar el archivo:")

    export = client.get("/archivos/exportar", headers=headers)
    assert export.status_code == 200
    assert "registros_" in export.headers["content-disposition"]
    ws = load_workbook(BytesIO(export.content))["Registros"]
    assert [c.value for c in ws[1]] == ["Fecha", "BEO", "Salón", "Compañía", "Ítem", "Tipo", "Valor", "Cantidad", "Total"]
    assert ws.max_row == 3

    resumen = client.get("/archivos/exportar-resumen", headers=headers)
    assert resumen.status_code == 200
    ws = load_workbook(BytesIO(resumen.content))["Resumen Mensual"]
    assert [c.value for c in ws[2]] == ["Marzo 2024", 200, 200, 0]


def test_analytics_endpoints(client: TestClient):
    headers = new_user(client, "analytics@example.com")
    crear_registro(client, headers, salon="Salón A", compania="Acme", item="Iluminación", valor="800", cantidad="1")
    crear_registro(client, headers, salon="Salón B", compania="Beta", item="Sonido", valor="200", cantidad="1")

    resumen = client.get("/analytics/resumen", headers=headers)
    assert resumen.status_code == 200
    body = resumen.json()
    assert Decimal(body["total_general"]) == Decimal("1000")
    assert body["kpis"]["companias_unicas"] == 2
    assert body["kpis"]["salones_unicos"] == 2
    assert Decimal(body["kpis"]["promedio_valor"]) == Decimal("500")
    assert [g["nombre"] for g in body["por_compania"]] == ["Acme", "Beta"]
    assert [g["nombre"] for g in body["pareto"]] == ["Iluminación"]

    agrupado = client.get("/analytics/agrupado", params={"campo": "salon"}, headers=headers)
    assert agrupado.status_code == 200
    assert agrupado.json()["grupos"][0]["nombre"] == "Salón A"
    assert client.get("/analytics/agrupado", params={"campo": "item"}, headers=headers).status_code == 400

    fuera = client.get(
        "/analytics/resumen",
        params={"desde": "2001-01-01", "hasta": "2001-12-31"},
        headers=headers,
    ).json()
    assert fuera["kpis"] is None
    assert Decimal(fuera["total_general"]) == Decimal("1000")

    png = client.get("/analytics/graficos/pareto.png", headers=headers)
    assert png.status_code == 200
    assert png.headers["content-type"] == "image/png"
    assert png.content.startswith(b"\x89PNG")
    assert client.get("/analytics/graficos/otro.png", headers=headers).status_code == 404


def test_asistente_endpoints(client: TestClient, monkeypatch):
    headers = new_user(client, "chat@example.com")

    saludo = client.get("/asistente", headers=headers)
    assert saludo.json()["respuesta"].startswith("¡Hola!")

    class FakeResponse:
        def raise_for_status(self) -> None:
            return None

        def json(self) -> dict:
            return {"text": "Usa la sección Importar."}

    monkeypatch.setattr("magix.services.asistente.requests.post", lambda *a, **kw: FakeResponse())
    chat = client.post("/asistente", json={"mensaje": "¿Cómo importo?"}, headers=headers)
    assert chat.status_code == 200
    assert chat.json()["respuesta"] == "Usa la sección Importar."

    assert client.post("/asistente", json={"mensaje": "   "}, headers=headers).status_code == 422


def test_admin_audit(client: TestClient):
    headers = new_user(client, "auditado@example.com")
    crear_registro(client, headers)

    assert client.get("/admin/auditoria", headers=headers).status_code == 403

    admin = auth_headers(login(client, "admin@example.com", "Admin1234!"))
    response = client.get("/admin/auditoria", params={"action": "REGISTRO_CREATE"}, headers=admin)
    assert response.status_code == 200
    entries = response.json()
    assert entries
    assert all(e["action"] == "REGISTRO_CREATE" for e in entries)
    assert all(len(e["summary"]) <= 500 for e in entries)


def test_import_rounds_amounts_to_stored_precision(client: TestClient):
    headers = new_user(client, "import-centavos@example.com")
    csv = (
        "Fecha,Salón,Compañía,Ítem,Tipo,Valor,Cantidad\n"
        "15-03-2024,Salón A,Acme,Luz,Venta,1.005,3\n"
        "15-03-2024,Salón A,Acme,Sonido,Venta,1e20,1\n"
    ).encode("utf-8")
    response = client.post(
        "/archivos/importar",
        files={"archivo": ("montos.csv", csv, "text/csv")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["insertados"] == 1
    assert body["omitidas"] == [{"fila": 3, "motivo": "valor o cantidad exceden el máximo permitido"}]

    stored = client.get("/registros", headers=headers).json()
    assert (Decimal(stored[0]["valor"]), Decimal(stored[0]["total"])) == (Decimal("1.01"), Decimal("3.03"))
    assert_totales_exactos(stored)


def test_admin_audit_filters_by_entity(client: TestClient):
    headers = new_user(client, "auditado-entidad@example.com")
    crear_registro(client, headers)
    admin = auth_headers(login(client, "admin@example.com", "Admin1234!"))

    response = client.get("/admin/auditoria", params={"entity": "Registro"}, headers=admin)
    assert response.status_code == 200
    assert response.json()
    assert all(e["entity"] == "Registro" for e in response.json())

    assert client.get("/admin/auditoria", params={"entity": "Apuesta"}, headers=admin).status_code == 422


def test_rate_limit_handler_registered():
    from slowapi import _rate_limit_exceeded_handler
    from slowapi.errors import RateLimitExceeded

    from magix.main import app

    assert app.exception_handlers[RateLimitExceeded] is _rate_limit_exceeded_handler
