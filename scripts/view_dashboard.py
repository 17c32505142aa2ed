"""
Script para visualizar no terminal o agregado do dashboard lido do Firestore.

Rode: python scripts/view_dashboard.py
"""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.domain.analytics.models import AggregationStrategy
from src.domain.analytics.periods import Period, resolve_period
from src.domain.services.dashboard_service import DashboardParams, get_dashboard_service
from src.infrastructure.firestore.client import close_firestore


def print_header(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60 + "\n")


async def show_job_stats(period: Period):
    """Mostra contagem de jobs por status"""

    print_header("⚙️  PROCESSING JOBS")

    stats = await get_dashboard_service().get_job_stats(period)
    print(f"   ⏳ Pendentes: {stats.pending}")
    print(f"   🔄 Processando: {stats.processing}")
    print(f"   ✅ Concluídos: {stats.done}")
    print(f"   ❌ Falhos: {stats.failed}")


async def show_phases(strategy: AggregationStrategy, params: DashboardParams):
    """Mostra métricas por fase"""

    print_header(f"📊 FASES ({strategy.value})")

    aggregate = await get_dashboard_service().compute_dashboard_aggregate(strategy, params)

    if not aggregate.phases:
        print("📭 Nenhuma fase encontrada nessa janela.\n")
        return

    for i, phase in enumerate(aggregate.phases, 1):
        duration = (
            f"{phase.mean_duration_minutes} min"
            if phase.mean_duration_minutes is not None else "sem amostra"
        )
        print(f"{i}. {phase.phase_name} ({phase.phase_key})")
        print(f"   💬 Mensagens: {phase.message_count}")
        print(f"   🤬 Ofensas: {phase.offense_count} | 🏳️  Desistências: {phase.giveup_count}")
        print(f"   ⏱️  Tempo médio: {duration}")
        if phase.top_words:
            words = ", ".join(f"{w.word} ({w.count})" for w in phase.top_words[:5])
            print(f"   🔤 Palavras: {words}")
        print()

    print(f"📈 Totais:")
    print(f"   💬 Mensagens: {aggregate.total_messages}")
    print(f"   🤬 Ofensas: {aggregate.total_offenses}")
    print(f"   🏳️  Desistências: {aggregate.total_giveups}")
    print(f"   ⏱️  Tempo médio total: {aggregate.mean_total_minutes} min")
    print()


async def main():
    """Menu principal"""

    period = resolve_period(input("Período (24h, 7d, 30d, all) [7d]: ").strip())
    game_id = input("Jogo (vazio = todos): ").strip() or None
    params = DashboardParams(period=period, game_id=game_id)

    try:
        while True:
            print("\n╔" + "=" * 58 + "╗")
            print("║" + " " * 18 + "DASHBOARD DE ANÁLISE" + " " * 20 + "║")
            print("╚" + "=" * 58 + "╝\n")
            print("  1. ⚙️  Ver Jobs")
            print("  2. 💬 Ver Fases (chats)")
            print("  3. 🤖 Ver Fases (agent_responses)")
            print("  4. ❌ Sair\n")

            choice = input("Escolha uma opção (1-4): ").strip()

            if choice == "1":
                await show_job_stats(period)
            elif choice == "2":
                await show_phases(AggregationStrategy.CONVERSATIONS, params)
            elif choice == "3":
                await show_phases(AggregationStrategy.AGENT_RESPONSES, params)
            elif choice == "4":
                print("\n👋 Até logo!\n")
                break
            else:
                print("\n⚠️  Opção inválida!\n")

            input("\nPressione ENTER para continuar...")
    finally:
        await close_firestore()


if __name__ == "__main__":
    asyncio.run(main())
