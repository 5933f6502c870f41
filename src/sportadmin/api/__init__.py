"""REST API for the sports taxonomy admin."""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from fastapi import FastAPI, File, Form, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool

from sportadmin.api.schemas import Envelope, ErrorEnvelope, TeamHistoryResponse
from sportadmin.config_loader import AppConfig, get_config
from sportadmin.errors import NotFoundError, SportAdminError, UnexpectedError, ValidationError
from sportadmin.lineage import populate_history, team_history
from sportadmin.media import LocalMediaUploader, MediaUploader, uploader_from_config
from sportadmin.models import (
    LeagueTeam,
    build_edition,
    build_sport,
    build_team,
    build_tournament,
    utcnow,
)
from sportadmin.persistence import TaxonomyStore
from sportadmin.standings import (
    check_edition_references,
    list_by_tournament,
    normalize_standings,
    populate_editions,
    sort_by_year,
)


logger = logging.getLogger("uvicorn.error")

API_PREFIX = "/api/v1"

# Stands in for the image URL while a record is validated ahead of its upload.
_PENDING_IMAGE = "pending://upload"


def _require(message: str, **values: Any) -> None:
    missing = [name for name, value in values.items() if value is None or (isinstance(value, str) and not value.strip())]
    if missing:
        raise ValidationError(message)


def _parse_teams(raw: str | None) -> list[Mapping[str, Any]]:
    if raw is None or not raw.strip():
        return []
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid teams JSON: {exc}") from exc
    if not isinstance(parsed, list):
        raise ValidationError("teams must be a JSON array")
    return parsed


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


async def _write_temp(upload: UploadFile | None) -> Path | None:
    if upload is None:
        return None
    contents = await upload.read()
    if not contents:
        return None
    suffix = Path(upload.filename or "").suffix
    tmp = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    try:
        tmp.write(contents)
        tmp.flush()
    finally:
        tmp.close()
    return Path(tmp.name)


def _envelope(data: Any, message: str) -> Envelope:
    return Envelope(success=True, data=data, message=message)


def create_app(
    config: AppConfig | None = None,
    *,
    store: TaxonomyStore | None = None,
    uploader: MediaUploader | None = None,
) -> FastAPI:
    config = config or get_config()
    app = FastAPI(title="sportadmin")
    store = store or TaxonomyStore(config.db_path)
    uploader = uploader or uploader_from_config(config)
    app.state.store = store
    app.state.uploader = uploader

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )
    if isinstance(uploader, LocalMediaUploader) and uploader.base_url.startswith("/"):
        app.mount(uploader.base_url, StaticFiles(directory=uploader.root, check_dir=False), name="media")

    @app.exception_handler(SportAdminError)
    async def handle_domain_error(request: Request, exc: SportAdminError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.__cause__ or exc)
        return JSONResponse(status_code=exc.status_code, content=ErrorEnvelope(message=exc.message).model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_request_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ())[1:])}: {error.get('msg')}" for error in exc.errors()
        )
        return JSONResponse(status_code=400, content=ErrorEnvelope(message=details or "Invalid request").model_dump())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        error = UnexpectedError()
        logger.error("Unexpected error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=error.status_code, content=ErrorEnvelope(message=error.message).model_dump())

    async def upload_image(upload: UploadFile | None, folder: str) -> str:
        path = await _write_temp(upload)
        if path is None:
            raise ValidationError("Image file is required")
        try:
            return await run_in_threadpool(uploader.upload, path, folder)
        finally:
            path.unlink(missing_ok=True)

    def ensure_unique_sport(name: str, exclude_id: str | None = None) -> None:
        wanted = name.strip()
        for sport in store.list_sports():
            if sport.name == wanted and sport.id != exclude_id:
                raise ValidationError(f"Sport '{wanted}' already exists")

    def ensure_sport(sport_id: str) -> None:
        if store.get_sport(sport_id) is None:
            raise ValidationError("Unknown sport")

    def ensure_team_references(team: Any) -> None:
        ensure_sport(team.sport)
        if isinstance(team, LeagueTeam):
            tournament = store.get_tournament(team.tournament)
            if tournament is None:
                raise ValidationError("Unknown tournament")
            if tournament.type != "League":
                raise ValidationError("League teams must belong to a League tournament")
            if tournament.sport != team.sport:
                raise ValidationError("Tournament does not belong to the selected sport")

    def fetch_or_404(getter, record_id: str, label: str):
        record = getter(record_id)
        if record is None:
            raise NotFoundError(f"{label} not found")
        return record

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    # sports

    @app.post(f"{API_PREFIX}/createSport", status_code=201)
    async def create_sport(
        name: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        _require("All fields are required", name=name)
        if not _has_file(image):
            raise ValidationError("Image file is required")
        draft = build_sport(name=name, image_url=_PENDING_IMAGE)
        ensure_unique_sport(draft.name)
        image_url = await upload_image(image, "sports")
        sport = store.add_sport(draft.model_copy(update={"image_url": image_url}))
        return _envelope(sport, "Sport created successfully")

    @app.get(f"{API_PREFIX}/getSport")
    async def list_sports() -> Envelope:
        return _envelope(store.list_sports(), "All sports data are fetched")

    @app.get(f"{API_PREFIX}/getSport/{{sport_id}}")
    async def get_sport(sport_id: str) -> Envelope:
        return _envelope(fetch_or_404(store.get_sport, sport_id, "Sport"), "Sport fetched")

    @app.put(f"{API_PREFIX}/updateSport/{{sport_id}}")
    async def update_sport(
        sport_id: str,
        name: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        existing = fetch_or_404(store.get_sport, sport_id, "Sport")
        payload = existing.model_dump()
        if name is not None:
            payload["name"] = name
        payload["updated_at"] = utcnow()
        draft = build_sport(**payload)
        ensure_unique_sport(draft.name, exclude_id=sport_id)
        if _has_file(image):
            draft = draft.model_copy(update={"image_url": await upload_image(image, "sports")})
        sport = store.replace_sport(draft)
        return _envelope(sport, "Sport updated successfully")

    @app.delete(f"{API_PREFIX}/deleteSport/{{sport_id}}")
    async def delete_sport(sport_id: str) -> Envelope:
        store.delete_sport(sport_id)
        return _envelope(None, "Sport deleted successfully")

    # tournaments

    @app.post(f"{API_PREFIX}/createTournament", status_code=201)
    async def create_tournament(
        name: Optional[str] = Form(None),
        sport: Optional[str] = Form(None),
        type: Optional[str] = Form(None),
        priority: Optional[float] = Form(None),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        _require("All fields are required", name=name, sport=sport, type=type)
        if not _has_file(image):
            raise ValidationError("Image file is required")
        draft = build_tournament(name=name, sport=sport, type=type, priority=priority, image_url=_PENDING_IMAGE)
        ensure_sport(draft.sport)
        image_url = await upload_image(image, "tournaments")
        tournament = store.add_tournament(draft.model_copy(update={"image_url": image_url}))
        return _envelope(tournament, "Tournament created successfully")

    @app.get(f"{API_PREFIX}/getTournament")
    async def list_tournaments(
        sport: Optional[str] = Query(None),
        type: Optional[str] = Query(None),
    ) -> Envelope:
        return _envelope(store.list_tournaments(sport=sport, type=type), "All tournaments data are fetched")

    @app.get(f"{API_PREFIX}/getTournament/{{tournament_id}}")
    async def get_tournament(tournament_id: str) -> Envelope:
        return _envelope(fetch_or_404(store.get_tournament, tournament_id, "Tournament"), "Tournament fetched")

    @app.put(f"{API_PREFIX}/updateTournament/{{tournament_id}}")
    async def update_tournament(
        tournament_id: str,
        name: Optional[str] = Form(None),
        sport: Optional[str] = Form(None),
        type: Optional[str] = Form(None),
        priority: Optional[float] = Form(None),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        existing = fetch_or_404(store.get_tournament, tournament_id, "Tournament")
        payload = existing.model_dump()
        for field, value in (("name", name), ("sport", sport), ("type", type), ("priority", priority)):
            if value is not None:
                payload[field] = value
        payload["updated_at"] = utcnow()
        draft = build_tournament(**payload)
        ensure_sport(draft.sport)
        if _has_file(image):
            draft = draft.model_copy(update={"image_url": await upload_image(image, "tournaments")})
        tournament = store.replace_tournament(draft)
        return _envelope(tournament, "Tournament updated successfully")

    @app.delete(f"{API_PREFIX}/deleteTournament/{{tournament_id}}")
    async def delete_tournament(tournament_id: str) -> Envelope:
        store.delete_tournament(tournament_id)
        return _envelope(None, "Tournament deleted successfully")

    # teams

    @app.post(f"{API_PREFIX}/createTeam", status_code=201)
    async def create_team(
        name: Optional[str] = Form(None),
        sport: Optional[str] = Form(None),
        type: Optional[str] = Form(None),
        country: Optional[str] = Form(None),
        city: Optional[str] = Form(None),
        tournament: Optional[str] = Form(None),
        inactive: bool = Form(False),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        _require("All fields are required", name=name, sport=sport, type=type)
        if not _has_file(image):
            raise ValidationError("Image file is required")
        draft = build_team(
            name=name,
            sport=sport,
            type=type,
            country=country,
            city=city,
            tournament=tournament,
            inactive=inactive,
            image_url=_PENDING_IMAGE,
        )
        ensure_team_references(draft)
        image_url = await upload_image(image, "teams")
        team = store.add_team(draft.model_copy(update={"image_url": image_url}))
        return _envelope(team, "Team created successfully")

    @app.get(f"{API_PREFIX}/getTeam")
    async def list_teams(
        sport: Optional[str] = Query(None),
        tournament: Optional[str] = Query(None),
        type: Optional[str] = Query(None),
        city: Optional[str] = Query(None),
        country: Optional[str] = Query(None),
        inactive: Optional[bool] = Query(None),
    ) -> Envelope:
        teams = store.list_teams(
            sport=sport,
            tournament=tournament,
            type=type,
            city=city,
            country=country,
            inactive=inactive,
        )
        return _envelope(teams, "All teams data are fetched")

    @app.get(f"{API_PREFIX}/getTeam/{{team_id}}")
    async def get_team(team_id: str) -> Envelope:
        return _envelope(fetch_or_404(store.get_team, team_id, "Team"), "Team fetched")

    @app.get(f"{API_PREFIX}/getTeamHistory/{{team_id}}")
    async def get_team_history(team_id: str) -> Envelope:
        history = team_history(store, team_id)
        won, runner_up = populate_history(store, history)
        lineage = history.lineage
        response = TeamHistoryResponse(
            team=lineage.team,
            current=lineage.current,
            members=list(lineage.members),
            won=won,
            runner_up=runner_up,
            titles=len(won),
            runner_up_count=len(runner_up),
        )
        return _envelope(response, "Team history fetched")

    @app.put(f"{API_PREFIX}/updateTeam/{{team_id}}")
    async def update_team(
        team_id: str,
        name: Optional[str] = Form(None),
        sport: Optional[str] = Form(None),
        type: Optional[str] = Form(None),
        country: Optional[str] = Form(None),
        city: Optional[str] = Form(None),
        tournament: Optional[str] = Form(None),
        inactive: Optional[bool] = Form(None),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        existing = fetch_or_404(store.get_team, team_id, "Team")
        payload = existing.model_dump()
        changes = {
            "name": name,
            "sport": sport,
            "type": type,
            "country": country,
            "city": city,
            "tournament": tournament,
            "inactive": inactive,
        }
        payload.update({field: value for field, value in changes.items() if value is not None})
        payload["updated_at"] = utcnow()
        draft = build_team(**payload)
        ensure_team_references(draft)
        if _has_file(image):
            draft = draft.model_copy(update={"image_url": await upload_image(image, "teams")})
        team = store.replace_team(draft)
        return _envelope(team, "Team updated successfully")

    @app.delete(f"{API_PREFIX}/deleteTeam/{{team_id}}")
    async def delete_team(team_id: str) -> Envelope:
        store.delete_team(team_id)
        return _envelope(None, "Team deleted successfully")

    # league editions

    @app.post(f"{API_PREFIX}/createLeague", status_code=201)
    async def create_league(
        name: Optional[str] = Form(None),
        year: Optional[int] = Form(None),
        sport: Optional[str] = Form(None),
        tournament: Optional[str] = Form(None),
        teams: Optional[str] = Form(None),
        joint_winner: Optional[bool] = Form(None, alias="jointWinner"),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        _require("Name, year, sport and tournament are required", name=name, year=year, sport=sport, tournament=tournament)
        if not _has_file(image):
            raise ValidationError("League logo is required")
        standings = normalize_standings(_parse_teams(teams), joint_winner=joint_winner)
        draft = build_edition(
            name=name,
            year=year,
            sport=sport,
            tournament=tournament,
            league_image_url=_PENDING_IMAGE,
            teams=standings,
        )
        check_edition_references(store, sport=draft.sport, tournament=draft.tournament, standings=draft.teams)
        image_url = await upload_image(image, "leagues")
        edition = store.add_league(draft.model_copy(update={"league_image_url": image_url}))
        return _envelope(edition, "League created successfully")

    @app.get(f"{API_PREFIX}/getLeague")
    async def list_leagues(
        sport: Optional[str] = Query(None),
        tournament: Optional[str] = Query(None),
        team_id: Optional[str] = Query(None, alias="teamId"),
    ) -> Envelope:
        if sport and tournament and not team_id:
            editions = list_by_tournament(store, sport, tournament)
        else:
            found = store.list_leagues(sport=sport, tournament=tournament, team=team_id)
            editions = populate_editions(store, sort_by_year(found))
        return _envelope(editions, "All leagues data are fetched")

    @app.get(f"{API_PREFIX}/getLeague/{{league_id}}")
    async def get_league(league_id: str) -> Envelope:
        edition = fetch_or_404(store.get_league, league_id, "League")
        return _envelope(populate_editions(store, [edition])[0], "League fetched")

    @app.put(f"{API_PREFIX}/updateLeague/{{league_id}}")
    async def update_league(
        league_id: str,
        name: Optional[str] = Form(None),
        year: Optional[int] = Form(None),
        sport: Optional[str] = Form(None),
        tournament: Optional[str] = Form(None),
        teams: Optional[str] = Form(None),
        joint_winner: Optional[bool] = Form(None, alias="jointWinner"),
        image: Optional[UploadFile] = File(None),
    ) -> Envelope:
        existing = fetch_or_404(store.get_league, league_id, "League")
        _require("Name, year, sport and tournament are required", name=name, year=year, sport=sport, tournament=tournament)
        standings = normalize_standings(_parse_teams(teams), joint_winner=joint_winner)
        draft = build_edition(
            id=existing.id,
            created_at=existing.created_at,
            updated_at=utcnow(),
            name=name,
            year=year,
            sport=sport,
            tournament=tournament,
            league_image_url=existing.league_image_url,
            teams=standings,
        )
        check_edition_references(store, sport=draft.sport, tournament=draft.tournament, standings=draft.teams)
        if _has_file(image):
            draft = draft.model_copy(update={"league_image_url": await upload_image(image, "leagues")})
        edition = store.replace_league(draft)
        return _envelope(edition, "League updated successfully")

    @app.delete(f"{API_PREFIX}/deleteLeague/{{league_id}}")
    async def delete_league(league_id: str) -> Envelope:
        store.delete_league(league_id)
        return _envelope(None, "League deleted successfully")

    return app
