"""
Sonar Scope
Top-down sonar display over a tick-mining session: steer the submarine,
mine nodes the sweep reveals, trade a full hold and upgrade.

Controls:
  W/S         Forward / Back
  A/D         Turn left / right
  E/Q         Rise / Dive
  F           Mine targeted node
  T           Trade full cargo
  U           Toggle upgrade menu (1-9 buys that many tiers up while open)
  I           Toggle inventory
  Escape      Quit
"""
from __future__ import annotations

import argparse
import math
import sys

import pygame

from tick_mining import GameState, MiningConfig, build_simulation, load_config

# --- Configuration ---
WIDTH, HEIGHT = 900, 700
FPS = 60
TITLE = "tick-mining Sonar Scope"

SCOPE_CENTER = (350, 350)
SCOPE_RADIUS = 320

BG_COLOR = (6, 18, 28)
GRID_COLOR = (20, 70, 60)
SWEEP_COLOR = (60, 255, 170)
PLAYER_COLOR = (255, 255, 255)
TARGET_COLOR = (255, 220, 80)
HUD_COLOR = (190, 230, 220)
ALERT_COLOR = (255, 110, 90)
MINERAL_COLORS = {
    "nickel": (170, 180, 200),
    "cobalt": (80, 120, 255),
    "copper": (230, 140, 60),
    "manganese": (200, 90, 200),
}


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Sonar Scope - tick-mining visual demo")
    p.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    p.add_argument("--config", type=str, default=None, metavar="FILE",
                   help="TOML file with a [mining] table")
    p.add_argument("--balance", type=float, default=0.0, help="Starting token balance")
    return p.parse_args()


def to_screen(session, wx: float, wz: float, scale: float) -> tuple[int, int]:
    """World (x, z) relative to the player, to scope pixels."""
    dx = (wx - session.position.x) * scale
    dz = (wz - session.position.z) * scale
    return (int(SCOPE_CENTER[0] + dx), int(SCOPE_CENTER[1] + dz))


def draw_scope(screen, session) -> None:
    config = session.config
    scale = SCOPE_RADIUS / config.sonar_range
    for r in range(1, 5):
        pygame.draw.circle(screen, GRID_COLOR, SCOPE_CENTER, SCOPE_RADIUS * r // 4, 1)

    # Lit arc trails the sweep line.
    steps = 24
    for i in range(steps):
        a = session.sweep_angle - config.sonar_arc * i / steps
        fade = 255 - int(200 * i / steps)
        end = (
            SCOPE_CENTER[0] + math.cos(a) * SCOPE_RADIUS,
            SCOPE_CENTER[1] + math.sin(a) * SCOPE_RADIUS,
        )
        pygame.draw.line(screen, (0, fade // 2, fade // 3), SCOPE_CENTER, end, 1)
    sweep_end = (
        SCOPE_CENTER[0] + math.cos(session.sweep_angle) * SCOPE_RADIUS,
        SCOPE_CENTER[1] + math.sin(session.sweep_angle) * SCOPE_RADIUS,
    )
    pygame.draw.line(screen, SWEEP_COLOR, SCOPE_CENTER, sweep_end, 2)

    for node in session.field:
        if node.id not in session.visible_nodes and node.id != session.target:
            continue
        pos = to_screen(session, node.x, node.y, scale)
        radius = max(3, int(node.size / 4))
        pygame.draw.circle(screen, MINERAL_COLORS[node.kind], pos, radius)
        if node.id == session.target:
            pygame.draw.circle(screen, TARGET_COLOR, pos, radius + 4, 2)

    for player in session.other_players:
        if player.id in session.contacts:
            pygame.draw.circle(screen, HUD_COLOR, to_screen(session, player.x, player.z, scale), 4, 1)

    # Heading 0 faces -z, which is up on the scope.
    h = session.position.heading
    tip = (SCOPE_CENTER[0] - math.sin(h) * 14, SCOPE_CENTER[1] - math.cos(h) * 14)
    pygame.draw.line(screen, PLAYER_COLOR, SCOPE_CENTER, tip, 2)
    pygame.draw.circle(screen, PLAYER_COLOR, SCOPE_CENTER, 5)


def draw_hud(screen, font, sim) -> None:
    view = sim.view()
    stats = view["stats"]
    x0 = 700
    lines = [
        f"State: {view['state']}",
        f"Tier: {stats['tier']}",
        f"Energy: {stats['energy']:.1f}/{stats['max_energy']:.0f}",
        f"Depth: {view['position']['y']:.2f}",
        f"Balance: {view['balance']:.1f}",
        f"Storage: {view['storage_percentage']}%",
        "",
    ]
    if view["inventory_open"]:
        for kind, cap in view["capacity"].items():
            lines.append(f"{kind:>9}: {cap['used']}/{cap['max']}")
        lines.append("")
    if view["upgrade_menu_open"]:
        for option in sim.upgrades.options()[:9]:
            lines.append(
                f"T{option.definition.tier} {option.definition.upgrade_cost.tokens:.0f} "
                f"{option.status.value}"
            )
    for i, line in enumerate(lines):
        screen.blit(font.render(line, True, HUD_COLOR), (x0, 12 + i * 18))

    alerts = []
    if view["alerts"]["storage_full"]:
        alerts.append("STORAGE FULL")
    elif view["alerts"]["storage_warning"]:
        alerts.append("STORAGE NEARLY FULL")
    if view["alerts"]["energy_depleted"]:
        alerts.append("ENERGY DEPLETED")
    for i, text in enumerate(alerts):
        screen.blit(font.render(text, True, ALERT_COLOR), (12, HEIGHT - 24 - i * 18))


def main() -> None:
    args = parse_args()
    config = load_config(args.config) if args.config else MiningConfig()
    sim = build_simulation(config=config, seed=args.seed, balance=args.balance)

    pygame.init()
    screen = pygame.display.set_mode((WIDTH, HEIGHT))
    pygame.display.set_caption(TITLE)
    pg_clock = pygame.time.Clock()
    font = pygame.font.SysFont("monospace", 14)

    # Fixed timestep: accumulate frame time, step the engine per tick_ms.
    accumulator = 0.0
    running = True

    while running:
        frame_ms = pg_clock.tick(FPS)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                    continue
                name = pygame.key.name(event.key)
                if sim.session.upgrade_menu_open and name.isdigit() and name != "0":
                    sim.upgrade(sim.session.tier + int(name))
                else:
                    sim.press(name)
            elif event.type == pygame.KEYUP:
                sim.release(pygame.key.name(event.key))

        accumulator += frame_ms
        while accumulator >= config.tick_ms:
            sim.step()
            accumulator -= config.tick_ms

        screen.fill(BG_COLOR)
        draw_scope(screen, sim.session)
        draw_hud(screen, font, sim)
        if sim.session.state is not GameState.IDLE:
            busy = font.render(sim.session.state.value.upper(), True, TARGET_COLOR)
            screen.blit(busy, (SCOPE_CENTER[0] - busy.get_width() // 2, 12))
        pygame.display.flip()

    sim.shutdown()
    pygame.quit()
    sys.exit()


if __name__ == "__main__":
    main()
