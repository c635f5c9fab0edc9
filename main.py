"""
main.py — Interface CLI seguindo Clean Architecture
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from clipstudio.application.services.editor_service import EditorService
from clipstudio.application.services.seo_service import SeoService
from clipstudio.application.services.thumbnail_service import ThumbnailService
from clipstudio.domain.errors import ClipStudioError
from clipstudio.domain.models.generation import GenerationRequest, SeedImage
from clipstudio.domain.models.seo import VideoCategory, VideoLanguage
from clipstudio.domain.models.timeline import OVERLAY_FIELDS, OVERLAY_POSITIONS
from clipstudio.infra.logging import setup_logging
from clipstudio.infra.settings import load_settings


def print_progress(fraction: float):
    print(f"\rRenderizando... {fraction * 100:5.1f}%", end="", flush=True)
    if fraction >= 1.0:
        print()


def print_timeline(editor: EditorService):
    timeline = editor.timeline
    if not len(timeline):
        print("Timeline vazia.")
    for i, clip in enumerate(timeline.clips, 1):
        print(
            f"{i:2d}. {clip.id}  {clip.name!r}  "
            f"[{clip.trim_start:.2f}s - {clip.trim_end:.2f}s] de {clip.duration:.2f}s"
        )
    for overlay in timeline.overlays:
        print(
            f"    legenda {overlay.id}  {overlay.text!r}  "
            f"{overlay.position} [{overlay.start_time:.2f}s - {overlay.end_time:.2f}s]"
        )
    print(f"Duração total: {timeline.total_duration():.2f}s")


async def cmd_gerar(editor: EditorService, args) -> int:
    request = GenerationRequest(
        prompt=args.prompt,
        seed_image=SeedImage.from_path(Path(args.imagem)),
        aspect_ratio=args.proporcao,
        quality_mode=args.qualidade,
    )
    editor.orchestrator.on_status = lambda state, message: print(f"[{state.value}] {message}")
    clip = await editor.generate_clip(request)
    print(f"Clipe adicionado: {clip.id} ({clip.duration:.2f}s)")
    return 0


async def cmd_renderizar(editor: EditorService, args) -> int:
    await editor.render(on_progress=print_progress)
    destination = editor.export(Path(args.saida))
    print(f"Vídeo salvo em: {destination}")
    return 0


async def cmd_miniaturas(settings, args) -> int:
    service = ThumbnailService(api_key=settings.gemini_api_key, model=settings.image_model)
    save_thumbnails(await service.generate_batch(args.ideias), args.pasta)
    return 0


def build_seo_service(settings) -> SeoService:
    thumbnails = ThumbnailService(api_key=settings.gemini_api_key, model=settings.image_model)
    return SeoService(
        api_key=settings.gemini_api_key,
        model=settings.seo_model,
        thinking_model=settings.seo_thinking_model,
        keyword_model=settings.keyword_model,
        thumbnails=thumbnails,
    )


def save_thumbnails(thumbnails, folder: str):
    output_dir = Path(folder)
    output_dir.mkdir(parents=True, exist_ok=True)
    for i, thumbnail in enumerate(thumbnails, 1):
        if not thumbnail.available:
            print(f"{i}. sem imagem: {thumbnail.idea}")
            continue
        ext = (thumbnail.mime_type or "image/png").split("/")[-1]
        path = output_dir / f"miniatura_{i}.{ext}"
        path.write_bytes(thumbnail.image)
        print(f"{i}. {thumbnail.idea}\n   {path}")


async def cmd_seo(settings, args) -> int:
    pack = await build_seo_service(settings).generate_pack(
        text=args.texto or "",
        video=Path(args.video) if args.video else None,
        category=VideoCategory(args.categoria),
        language=VideoLanguage(args.idioma),
        thinking=args.pensar,
    )
    print(f"Idioma: {pack.language.language} ({pack.language.confidence:.0f}%)")
    if pack.story:
        print(f"\nHistória:\n{pack.story}")
    print("\nTítulos:")
    for title in pack.titles:
        print(f"  - {title}")
    print(f"\nDescrição curta:\n{pack.description.short}")
    print(f"\nDescrição longa:\n{pack.description.long}")
    print(f"\nTags: {', '.join(pack.tags)}")
    print(f"Hashtags: {' '.join(pack.hashtags)}")
    print(f"\nPontuação de SEO: {pack.score.score:.0f}/100 - {pack.score.justification}")
    print("\nMiniaturas:")
    save_thumbnails(pack.thumbnails, args.pasta)
    return 0


async def cmd_palavras_chave(settings, args) -> int:
    research = await build_seo_service(settings).suggest_keywords(args.topico)
    if not research.suggestions:
        print("Nenhuma palavra-chave reconhecida na resposta.")
    for suggestion in research.suggestions:
        print(
            f"{suggestion.keyword:50s} volume={suggestion.volume:6s} "
            f"concorrência={suggestion.competition}"
        )
    if research.sources:
        print("\nFontes:")
        for source in research.sources:
            print(f"  - {source.title}: {source.uri}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Gera clipes de vídeo com IA, edita a timeline e renderiza com FFmpeg."
    )
    parser.add_argument("--projeto", default="projeto.json", help="Arquivo do projeto (JSON)")
    parser.add_argument("--debug", action="store_true", help="Log detalhado")
    sub = parser.add_subparsers(dest="comando", required=True)

    gerar = sub.add_parser("gerar", help="Gera um novo clipe e adiciona à timeline")
    gerar.add_argument("--prompt", required=True, help="Descrição do clipe")
    gerar.add_argument("--imagem", required=True, help="Imagem inicial")
    gerar.add_argument("--proporcao", choices=["16:9", "9:16"], default="16:9")
    gerar.add_argument(
        "--qualidade",
        choices=["fast", "quality"],
        default="fast",
        help="fast = modelo rápido, quality = modelo de maior qualidade",
    )

    sub.add_parser("listar", help="Mostra clipes e legendas")

    aparar = sub.add_parser("aparar", help="Ajusta o corte de um clipe")
    aparar.add_argument("clipe")
    aparar.add_argument("--inicio", type=float, help="Início do corte (s)")
    aparar.add_argument("--fim", type=float, help="Fim do corte (s)")

    remover = sub.add_parser("remover", help="Remove um clipe")
    remover.add_argument("clipe")

    legenda = sub.add_parser("legenda", help="Adiciona uma legenda sobre toda a timeline")
    legenda.add_argument("texto")
    legenda.add_argument("--posicao", choices=OVERLAY_POSITIONS, default="center")

    editar = sub.add_parser("legenda_editar", help="Altera um campo de uma legenda")
    editar.add_argument("legenda")
    editar.add_argument("campo", choices=OVERLAY_FIELDS)
    editar.add_argument("valor")

    remover_legenda = sub.add_parser("legenda_remover", help="Remove uma legenda")
    remover_legenda.add_argument("legenda")

    renderizar = sub.add_parser("renderizar", help="Renderiza o vídeo final")
    renderizar.add_argument("--saida", required=True, help="Arquivo de saída do vídeo")

    miniaturas = sub.add_parser("miniaturas", help="Gera miniaturas a partir de ideias")
    miniaturas.add_argument("ideias", nargs="+")
    miniaturas.add_argument("--pasta", default="miniaturas")

    seo = sub.add_parser("seo", help="Gera títulos, descrições, tags e miniaturas")
    seo.add_argument("texto", nargs="?", help="Ideia ou roteiro do vídeo")
    seo.add_argument("--video", help="Arquivo de vídeo a analisar (em vez do texto)")
    seo.add_argument(
        "--categoria",
        choices=[c.value for c in VideoCategory],
        default=VideoCategory.ENTERTAINMENT.value,
    )
    seo.add_argument(
        "--idioma",
        choices=[lang.value for lang in VideoLanguage],
        default=VideoLanguage.AUTO_DETECT.value,
    )
    seo.add_argument("--pensar", action="store_true", help="Usa o modelo de raciocínio")
    seo.add_argument("--pasta", default="miniaturas")

    palavras = sub.add_parser("palavras_chave", help="Sugere palavras-chave para um tópico")
    palavras.add_argument("topico")

    return parser


async def run(args) -> int:
    settings = load_settings()
    if args.comando == "miniaturas":
        return await cmd_miniaturas(settings, args)
    if args.comando == "seo":
        return await cmd_seo(settings, args)
    if args.comando == "palavras_chave":
        return await cmd_palavras_chave(settings, args)

    project_path = Path(args.projeto)
    editor = EditorService.from_settings(settings, project_path)
    timeline = editor.timeline
    try:
        if args.comando == "gerar":
            return await cmd_gerar(editor, args)
        if args.comando == "renderizar":
            return await cmd_renderizar(editor, args)
        if args.comando == "listar":
            print_timeline(editor)
        elif args.comando == "aparar":
            if args.inicio is not None:
                timeline.set_trim(args.clipe, "start", args.inicio)
            if args.fim is not None:
                timeline.set_trim(args.clipe, "end", args.fim)
        elif args.comando == "remover":
            editor.remove_clip(args.clipe)
        elif args.comando == "legenda":
            if timeline.add_overlay(args.texto, args.posicao) is None:
                print("Texto da legenda vazio; nada foi adicionado.")
                return 1
        elif args.comando == "legenda_editar":
            timeline.update_overlay(args.legenda, args.campo, args.valor)
        elif args.comando == "legenda_remover":
            timeline.remove_overlay(args.legenda)
        return 0
    finally:
        editor.save(project_path)
        editor.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("clipstudio.log", logging.DEBUG if args.debug else logging.INFO)
    try:
        return asyncio.run(run(args))
    except ClipStudioError as e:
        print(f"Erro: {e.message}", file=sys.stderr)
        return 1
    except KeyError as e:
        print(f"Erro: identificador não encontrado: {e.args[0]}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Erro: valor inválido: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
