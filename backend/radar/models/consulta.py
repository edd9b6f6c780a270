"""Consultas de habilitação salvas (cache) e log de auditoria."""

from datetime import date, datetime

from sqlalchemy import BigInteger, Boolean, Date, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from radar.core.database import Base

# Campos de habilitação (RADAR); todos vazios = cache "podre"
CAMPOS_HABILITACAO = ("contribuinte", "situacao", "data_situacao", "submodalidade")

CAMPOS_CADASTRAIS = (
    "razao_social",
    "nome_fantasia",
    "municipio",
    "uf",
    "data_constituicao",
    "regime_tributario",
    "data_opcao_simples",
    "capital_social",
)


class ConsultaRadar(Base):
    """Snapshot de uma consulta, um registro por CNPJ por dia consultado.

    Imutável após criado, exceto `exportado_por`.
    """

    __tablename__ = "consultas_radar"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    cnpj: Mapped[str] = mapped_column(String(14), nullable=False)
    data_consulta: Mapped[date] = mapped_column(Date, nullable=False)

    # Habilitação (RADAR)
    contribuinte: Mapped[str | None] = mapped_column(Text)
    situacao: Mapped[str | None] = mapped_column(Text)
    data_situacao: Mapped[str | None] = mapped_column(Text)
    submodalidade: Mapped[str | None] = mapped_column(Text)

    # Cadastrais (ReceitaWS)
    razao_social: Mapped[str | None] = mapped_column(Text)
    nome_fantasia: Mapped[str | None] = mapped_column(Text)
    municipio: Mapped[str | None] = mapped_column(Text)
    uf: Mapped[str | None] = mapped_column(String(2))
    data_constituicao: Mapped[str | None] = mapped_column(Text)
    regime_tributario: Mapped[str | None] = mapped_column(Text)
    data_opcao_simples: Mapped[str | None] = mapped_column(Text)
    capital_social: Mapped[str | None] = mapped_column(Text)

    # Quem exportou (preenchido no histórico)
    exportado_por: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("idx_consultas_radar_cnpj_data", "cnpj", "data_consulta"),
    )

    def __repr__(self):
        return f"<ConsultaRadar {self.cnpj} {self.data_consulta}>"


class ConsultaLog(Base):
    """Trilha de auditoria das consultas (somente escrita)."""

    __tablename__ = "consultas_log"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    usuario_id: Mapped[int] = mapped_column(ForeignKey("usuarios.id"), nullable=False)
    cnpj: Mapped[str] = mapped_column(String(14), nullable=False)
    data_hora: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    origem: Mapped[str] = mapped_column(String(20), nullable=False)
    sucesso: Mapped[bool] = mapped_column(Boolean, nullable=False)
    mensagem: Mapped[str | None] = mapped_column(Text)
