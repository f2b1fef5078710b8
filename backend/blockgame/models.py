from blockgame import db


class Block(db.Model):
    """One cell of the shared grid.

    owner and color are either both NULL (unclaimed) or both set.
    """
    __tablename__ = 'blocks'
    __table_args__ = (
        db.UniqueConstraint('row_num', 'col_num', name='uq_blocks_row_col'),
        db.CheckConstraint('(owner IS NULL) = (color IS NULL)', name='ck_blocks_owner_color_pair'),
    )
    id = db.Column(db.Integer, primary_key=True)
    row_num = db.Column(db.Integer, nullable=False)
    col_num = db.Column(db.Integer, nullable=False)
    owner = db.Column(db.String(64), nullable=True)
    color = db.Column(db.String(16), nullable=True)

    def __repr__(self):
        return f'<Block {self.id} ({self.row_num},{self.col_num}) owner={self.owner!r}>'
