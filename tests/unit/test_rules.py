"""
単体テスト: ルール判定のテスト
移動先の生成、取る手の生成、脱落判定を確認
"""

import pytest
from src.engine import (
    Board, Piece, PieceKind, Rules, MoveType, CaptureGeometry, AliveTest, directions,
    ORTHOGONALS
)
from src.engine.initial_setup import build_checkers_catalog, build_chess_catalog


def place(board, piece_id, kind, x, y):
    piece = Piece(piece_id, kind, x, y)
    board.add_piece(piece)
    return piece


@pytest.fixture
def checkers_board():
    return Board(10, 10)


@pytest.fixture
def chess_board():
    return Board(8, 8)


@pytest.fixture
def black():
    return build_checkers_catalog(0, forward=1)


@pytest.fixture
def white():
    return build_checkers_catalog(1, forward=-1)


class TestLegalMoves:
    """移動先の生成のテストクラス"""

    def test_man_moves_forward_diagonally(self, checkers_board, black):
        """man が斜め前の2マスに動けることを確認"""
        man = place(checkers_board, 0, black['man'], 3, 3)

        moves = Rules.get_legal_moves(checkers_board, man)

        assert [m.to_pos for m in moves] == [(2, 4), (4, 4)]
        assert all(m.move_type == MoveType.NORMAL for m in moves)

    def test_single_step_blocked_by_any_piece(self, checkers_board, black, white):
        """1マスの方向は、そのマスが空いているときだけ移動先になることを確認"""
        man = place(checkers_board, 0, black['man'], 3, 3)
        place(checkers_board, 1, white['man'], 2, 4)
        place(checkers_board, 2, black['man'], 4, 4)

        assert Rules.get_legal_moves(checkers_board, man) == []

    def test_edge_blocks_move(self, checkers_board, black):
        """盤の端では盤外に動かないことを確認"""
        man = place(checkers_board, 0, black['man'], 0, 3)

        moves = Rules.get_legal_moves(checkers_board, man)

        assert [m.to_pos for m in moves] == [(1, 4)]

    def test_sliding_ray_stops_before_blocker(self, checkers_board, black, white):
        """滑る駒は最初の駒の手前で止まり、その先は生成されないことを確認"""
        king = place(checkers_board, 0, black['king'], 0, 0)
        place(checkers_board, 1, white['man'], 3, 3)

        targets = [m.to_pos for m in Rules.get_legal_moves(checkers_board, king)]

        assert targets == [(1, 1), (2, 2)]
        assert (3, 3) not in targets, "ブロックしている駒のマスが移動先に含まれています"
        assert (4, 4) not in targets, "ブロックの先が移動先に含まれています"

    def test_max_steps_limits_ray(self, checkers_board):
        """max_steps を超えて進まないことを確認"""
        kind = PieceKind('runner', 0, moves=directions(((1, 0),), 3))
        runner = place(checkers_board, 0, kind, 0, 0)

        targets = [m.to_pos for m in Rules.get_legal_moves(checkers_board, runner)]

        assert targets == [(1, 0), (2, 0), (3, 0)]

    def test_order_follows_catalog(self, chess_board):
        """生成順がカタログの方向の順番に従うことを確認"""
        kind = PieceKind('cross', 0, moves=directions(ORTHOGONALS))
        piece = place(chess_board, 0, kind, 4, 4)

        targets = [m.to_pos for m in Rules.get_legal_moves(chess_board, piece)]

        assert targets == [(4, 3), (5, 4), (4, 5), (3, 4)]


class TestAdjacentCapture:
    """隣接して飛び越える取り方のテストクラス"""

    def test_capture_lands_behind(self, checkers_board, black, white):
        """相手の駒の直後の空きマスに着地することを確認"""
        man = place(checkers_board, 0, black['man'], 2, 2)
        target = place(checkers_board, 1, white['man'], 3, 3)

        captures = Rules.get_legal_captures(checkers_board, man, 0, CaptureGeometry.ADJACENT_LAND)

        assert len(captures) == 1
        assert captures[0].to_pos == (4, 4)
        assert captures[0].captured_id == target.piece_id
        assert captures[0].captured_pos == (3, 3)
        assert captures[0].move_type == MoveType.CAPTURE

    def test_backward_capture(self, checkers_board, black, white):
        """man は後ろ向きにも取れることを確認"""
        man = place(checkers_board, 0, black['man'], 4, 4)
        place(checkers_board, 1, white['man'], 3, 3)

        captures = Rules.get_legal_captures(checkers_board, man, 0, CaptureGeometry.ADJACENT_LAND)

        assert [c.to_pos for c in captures] == [(2, 2)]

    def test_occupied_landing_blocks_capture(self, checkers_board, black, white):
        """着地マスが埋まっていると取れないことを確認"""
        man = place(checkers_board, 0, black['man'], 2, 2)
        place(checkers_board, 1, white['man'], 3, 3)
        place(checkers_board, 2, white['man'], 4, 4)

        assert Rules.get_legal_captures(checkers_board, man, 0, CaptureGeometry.ADJACENT_LAND) == []

    def test_landing_off_board_blocks_capture(self, checkers_board, black, white):
        """着地マスが盤外なら取れないことを確認"""
        man = place(checkers_board, 0, black['man'], 8, 8)
        place(checkers_board, 1, white['man'], 9, 9)

        assert Rules.get_legal_captures(checkers_board, man, 0, CaptureGeometry.ADJACENT_LAND) == []

    def test_no_multi_jump_within_ray(self, checkers_board, black, white):
        """1つのレイで取れるのは最初の駒だけであることを確認"""
        king = place(checkers_board, 0, black['king'], 0, 0)
        place(checkers_board, 1, white['man'], 2, 2)
        place(checkers_board, 2, white['man'], 5, 5)

        captures = Rules.get_legal_captures(checkers_board, king, 0, CaptureGeometry.ADJACENT_LAND)

        assert [c.captured_pos for c in captures] == [(2, 2)]
        assert captures[0].to_pos == (3, 3)

    def test_king_captures_from_distance(self, checkers_board, black, white):
        """king は離れた相手の駒も取れることを確認"""
        king = place(checkers_board, 0, black['king'], 0, 0)
        place(checkers_board, 1, white['man'], 4, 4)

        captures = Rules.get_legal_captures(checkers_board, king, 0, CaptureGeometry.ADJACENT_LAND)

        assert [c.to_pos for c in captures] == [(5, 5)]

    def test_friendly_piece_stops_ray(self, checkers_board, black, white):
        """味方の駒で止まり、その先の相手の駒は取れないことを確認"""
        king = place(checkers_board, 0, black['king'], 0, 0)
        place(checkers_board, 1, black['man'], 2, 2)
        place(checkers_board, 2, white['man'], 4, 4)

        assert Rules.get_legal_captures(checkers_board, king, 0, CaptureGeometry.ADJACENT_LAND) == []

    def test_capture_is_owner_relative(self, checkers_board, black):
        """手番のプレイヤー自身の駒は取れないことを確認"""
        man = place(checkers_board, 0, black['man'], 2, 2)
        place(checkers_board, 1, black['man'], 3, 3)

        assert Rules.get_legal_captures(checkers_board, man, 0, CaptureGeometry.ADJACENT_LAND) == []

    def test_opposing_evaluated_against_mover(self, checkers_board, black):
        """「相手」は手番のプレイヤーIDで判定されることを確認"""
        man = place(checkers_board, 0, black['man'], 2, 2)
        place(checkers_board, 1, black['man'], 3, 3)

        # 別のプレイヤーとして問い合わせると、黒の駒も相手になる
        captures = Rules.get_legal_captures(checkers_board, man, 5, CaptureGeometry.ADJACENT_LAND)

        assert [c.to_pos for c in captures] == [(4, 4)]


class TestDisplaceCapture:
    """相手のマスに入る取り方のテストクラス"""

    def test_rook_moves_and_captures(self, chess_board):
        """ルークが相手の駒の手前まで動き、そのマスで取れることを確認"""
        rook = place(chess_board, 0, build_chess_catalog(1, forward=1)['rook'], 0, 0)
        pawn = place(chess_board, 1, build_chess_catalog(0, forward=-1)['pawn'], 0, 5)

        moves = [m.to_pos for m in Rules.get_legal_moves(chess_board, rook)]
        captures = Rules.get_legal_captures(chess_board, rook, 1, CaptureGeometry.DISPLACE)

        for y in range(1, 5):
            assert (0, y) in moves, f"(0, {y}) が移動先にありません"
        assert (0, 5) not in moves
        assert (0, 6) not in moves
        assert [c.to_pos for c in captures] == [(0, 5)]
        assert captures[0].captured_id == pawn.piece_id

    def test_pawn_captures_diagonally_only(self, chess_board):
        """ポーンは斜め前でだけ取れ、前の駒は取れないことを確認"""
        white = build_chess_catalog(0, forward=-1)
        black = build_chess_catalog(1, forward=1)
        pawn = place(chess_board, 0, white['pawn'], 4, 6)
        place(chess_board, 1, black['knight'], 4, 5)
        place(chess_board, 2, black['knight'], 5, 5)

        moves = Rules.get_legal_moves(chess_board, pawn)
        captures = Rules.get_legal_captures(chess_board, pawn, 0, CaptureGeometry.DISPLACE)

        assert moves == [], "前が塞がっているのに動けます"
        assert [c.to_pos for c in captures] == [(5, 5)]

    def test_knight_jumps(self, chess_board):
        """ナイトの移動が1ステップのレイとして扱われることを確認"""
        knight = place(chess_board, 0, build_chess_catalog(0, forward=-1)['knight'], 0, 0)

        targets = sorted(m.to_pos for m in Rules.get_legal_moves(chess_board, knight))

        assert targets == [(1, 2), (2, 1)]


class TestContendingPlayers:
    """脱落判定のテストクラス"""

    def test_any_piece_test(self, checkers_board, black, white):
        """ANY_PIECE では駒が残っていれば勝負に残ることを確認"""
        place(checkers_board, 0, black['man'], 1, 0)
        captured = place(checkers_board, 1, white['man'], 0, 9)
        captured.deactivate()

        assert Rules.contending_players(checkers_board, [0, 1], AliveTest.ANY_PIECE) == [0]

    def test_main_piece_test(self, chess_board):
        """MAIN_PIECE では main の駒が残っていないと脱落することを確認"""
        white = build_chess_catalog(0, forward=-1)
        black = build_chess_catalog(1, forward=1)
        place(chess_board, 0, white['king'], 4, 7)
        place(chess_board, 1, black['queen'], 3, 0)
        place(chess_board, 2, black['rook'], 0, 0)

        assert Rules.contending_players(chess_board, [0, 1], AliveTest.MAIN_PIECE) == [0]
        assert Rules.contending_players(chess_board, [0, 1], AliveTest.ANY_PIECE) == [0, 1]
