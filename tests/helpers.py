# tests/helpers.py
from app.core.permissions import Principal
from app.core.validation import AdjuntoEntrante

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def principal_de(usuario) -> Principal:
    return Principal.desde_usuario(usuario)


def headers_de(usuario) -> dict:
    return {"X-Usuario-Id": str(usuario.id)}


def pdf(nombre="documento.pdf", contenido=PDF_BYTES, content_type="application/pdf") -> AdjuntoEntrante:
    return AdjuntoEntrante(nombre=nombre, content_type=content_type, contenido=contenido)


def png(nombre="logo.png", contenido=PNG_BYTES, content_type="image/png") -> AdjuntoEntrante:
    return AdjuntoEntrante(nombre=nombre, content_type=content_type, contenido=contenido)
