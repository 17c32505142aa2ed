"""
Sobe a API do dashboard com uvicorn, depois de conferir o acesso ao Firestore.

Rode: python scripts/run_server.py
"""

import asyncio
import sys
from pathlib import Path

# Adiciona o diretório raiz ao path
sys.path.insert(0, str(Path(__file__).parent.parent))

import uvicorn
from src.core.config import get_settings
from src.infrastructure.firestore.client import check_firestore_connection, close_firestore

settings = get_settings()


async def preflight() -> bool:
    """Testa o Firestore antes de subir o servidor"""
    try:
        return await check_firestore_connection()
    finally:
        await close_firestore()


def main():
    """Inicia o servidor"""

    base_url = f"http://{settings.api_host}:{settings.api_port}"

    print("=" * 60)
    print(f"🚀 INICIANDO {settings.app_name} v{settings.app_version}")
    print("=" * 60)
    print(f"\n📍 Ambiente: {settings.environment}")
    print(f"🔥 Firestore: {settings.google_cloud_project or '(ADC)'} / {settings.firestore_database}")
    if settings.firestore_emulator_host:
        print(f"🧪 Emulador: {settings.firestore_emulator_host}")

    if settings.firestore_check_on_startup and not asyncio.run(preflight()):
        print("\n❌ Firestore inacessível. Confira GOOGLE_CLOUD_PROJECT e as credenciais.")
        sys.exit(1)

    print(f"\n🌐 URL: {base_url}")
    print(f"📚 Docs: {base_url}/docs")
    print(f"📊 Dashboard: {base_url}/api/dashboard?gameType=&period=7d")
    print(f"❤️  Health: {base_url}/health")
    print("\n" + "=" * 60)
    print("⚡ Pressione CTRL+C para parar o servidor")
    print("=" * 60 + "\n")

    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
